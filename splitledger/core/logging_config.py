import logging
from splitledger.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None):
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
    )
    # sqlalchemy echo is controlled by DB_ECHO, keep its logger quiet otherwise
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
