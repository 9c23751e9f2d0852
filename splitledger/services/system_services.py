import logging
from decimal import Decimal
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from splitledger.core.utils import qround
from splitledger.db.session import engine
from splitledger.models.group import Group
from splitledger.models.group_member import GroupMember
from splitledger.models.transaction import Transaction

logger = logging.getLogger(__name__)


async def check_db_service():
    try:
        async with engine.connect() as conn:
            await conn.exec_driver_sql("SELECT 1")
        return {"db": True, "message": "Database is connected"}
    except Exception as e:
        logger.error("Database health check failed: %s", e)
        return {"db": False, "error": str(e)}


async def system_health():
    return {"status": "ok"}


async def _count(db: AsyncSession, q) -> int:
    res = await db.execute(q)
    return res.scalar() or 0


async def system_metrics(db: AsyncSession):
    """
    Counts over active groups and live transactions.

    outstanding is the money still owed across all active groups,
    i.e. the sum of the positive member balances.
    """
    live = (Transaction.is_deleted == False, Group.is_active == True)

    transactions_q = (
        select(func.count(Transaction.id))
        .join(Group, Group.id == Transaction.group_id)
        .where(*live, Transaction.is_settlement == False)
    )
    settlements_q = (
        select(func.count(Transaction.id))
        .join(Group, Group.id == Transaction.group_id)
        .where(*live, Transaction.is_settlement == True)
    )
    members_q = (
        select(func.count(GroupMember.id))
        .join(Group, Group.id == GroupMember.group_id)
        .where(GroupMember.is_active == True, Group.is_active == True)
    )
    outstanding_q = (
        select(func.coalesce(func.sum(GroupMember.balance), 0))
        .join(Group, Group.id == GroupMember.group_id)
        .where(
            GroupMember.is_active == True,
            GroupMember.balance > 0,
            Group.is_active == True
        )
    )

    outstanding = (await db.execute(outstanding_q)).scalar()

    return {
        "groups": await _count(db, select(func.count(Group.id)).where(Group.is_active == True)),
        "members": await _count(db, members_q),
        "transactions": await _count(db, transactions_q),
        "settlements": await _count(db, settlements_q),
        "outstanding": qround(Decimal(str(outstanding))),
    }
