import logging
from contextlib import asynccontextmanager
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.orm.exc import StaleDataError
from splitledger.core.config import settings
from splitledger.core.exceptions import ConcurrencyConflict, PersistenceFailure

logger = logging.getLogger(__name__)

Base = declarative_base()

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DB_ECHO,
    pool_pre_ping=True
)

async_session = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False
)

# serialization_failure, deadlock_detected
CONFLICT_SQLSTATES = {"40001", "40P01"}


def is_conflict(exc: DBAPIError) -> bool:
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code in CONFLICT_SQLSTATES:
        return True
    return "database is locked" in str(orig)


@asynccontextmanager
async def atomic(db: AsyncSession):
    """
    Run a block of ledger writes as one database transaction.

    Commits when the block finishes, rolls everything back otherwise.
    Database errors are surfaced as ConcurrencyConflict or
    PersistenceFailure, ledger errors raised inside the block pass through.
    """
    try:
        yield db
        await db.commit()
    except StaleDataError as exc:
        await db.rollback()
        logger.warning("Stale row detected, rolled back: %s", exc)
        raise ConcurrencyConflict() from exc
    except DBAPIError as exc:
        await db.rollback()
        if is_conflict(exc):
            logger.warning("Write conflict, rolled back: %s", exc.orig)
            raise ConcurrencyConflict() from exc
        logger.error("Database error, rolled back: %s", exc.orig)
        raise PersistenceFailure() from exc
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Persistence error, rolled back: %s", exc)
        raise PersistenceFailure() from exc
    except BaseException:
        await db.rollback()
        raise
