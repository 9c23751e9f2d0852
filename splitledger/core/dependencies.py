from fastapi import Header, Request
from splitledger.core.notifier import Notifier, NoOpNotifier
from splitledger.db.session import async_session

async def get_db():
    async with async_session() as session:
        yield session

def get_notifier(request: Request) -> Notifier:
    return getattr(request.app.state, "notifier", None) or NoOpNotifier()

def get_actor_id(x_user_id: int | None = Header(default=None)) -> int | None:
    # identity is established by the upstream gate, the ledger only records it
    return x_user_id
