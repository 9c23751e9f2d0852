"""
Member balance primitives.

Balances change only through single UPDATE ... SET balance = balance + x
statements, so two requests touching the same member serialize on the
row instead of racing a read-modify-write.
"""
import logging
from decimal import Decimal
from typing import Dict, Mapping
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from splitledger.models.group_member import GroupMember
from splitledger.core.utils import ZERO, to_decimal

logger = logging.getLogger(__name__)


async def _increment(db: AsyncSession, group_id: int, user_id: int, delta: Decimal) -> bool:
    q = (
        update(GroupMember)
        .where(
            GroupMember.group_id == group_id,
            GroupMember.user_id == user_id,
            GroupMember.is_active == True,
        )
        .values(balance=GroupMember.balance + delta)
        .execution_options(synchronize_session=False)
    )

    res = await db.execute(q)

    if res.rowcount == 0:
        logger.warning(
            "Ledger inconsistency: no active member %s in group %s, skipped delta %s",
            user_id, group_id, delta
        )
        return False

    return True


async def credit(db: AsyncSession, group_id: int, user_id: int, amount) -> bool:
    return await _increment(db, group_id, user_id, to_decimal(amount))


async def debit(db: AsyncSession, group_id: int, user_id: int, amount) -> bool:
    return await _increment(db, group_id, user_id, -to_decimal(amount))


def transaction_deltas(paid_by: int, amount, splits: Mapping[int, Decimal]) -> Dict[int, Decimal]:
    """Net balance change per member: payer +amount, each participant -share."""
    deltas: Dict[int, Decimal] = {paid_by: to_decimal(amount)}
    for user_id, share in splits.items():
        deltas[user_id] = deltas.get(user_id, ZERO) - to_decimal(share)
    return deltas


async def _apply_deltas(db: AsyncSession, group_id: int, deltas: Dict[int, Decimal]):
    # fixed order keeps row locks from deadlocking between writers
    for user_id in sorted(deltas):
        delta = deltas[user_id]
        if delta > 0:
            await credit(db, group_id, user_id, delta)
        elif delta < 0:
            await debit(db, group_id, user_id, -delta)


async def apply_transaction(db: AsyncSession, group_id: int, paid_by: int, amount, splits):
    await _apply_deltas(db, group_id, transaction_deltas(paid_by, amount, splits))


async def reverse_transaction(db: AsyncSession, group_id: int, paid_by: int, amount, splits):
    deltas = transaction_deltas(paid_by, amount, splits)
    await _apply_deltas(db, group_id, {uid: -d for uid, d in deltas.items()})


async def get_member_balances(db: AsyncSession, group_id: int) -> Dict[int, Decimal]:
    q = (
        select(GroupMember.user_id, GroupMember.balance)
        .where(
            GroupMember.group_id == group_id,
            GroupMember.is_active == True,
        )
        .order_by(GroupMember.user_id)
    )

    res = await db.execute(q)
    return {row.user_id: Decimal(str(row.balance)) for row in res.all()}
