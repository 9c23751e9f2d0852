from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./splitledger.db"
    DB_ECHO: bool = False
    DB_CONNECT_RETRIES: int = 5
    LOG_LEVEL: str = "INFO"

    # none | log | webhook
    NOTIFIER: str = "none"
    NOTIFY_WEBHOOK_URL: str | None = None
    NOTIFY_TIMEOUT: float = 3.0

    class Config:
        env_file = ".env"

settings = Settings()
