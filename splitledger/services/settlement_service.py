from decimal import Decimal
from typing import Dict
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from splitledger.core.utils import SETTLE_EPSILON, ZERO, qround, simplify_debts
from splitledger.models.transaction import Transaction
from splitledger.models.transaction_split import TransactionSplit
from splitledger.services.group_services import get_active_group
from splitledger.services.ledger import get_member_balances


async def get_balances(db: AsyncSession, group_id: int):
    await get_active_group(db, group_id)
    balances = await get_member_balances(db, group_id)

    return [
        {
            "user_id": user_id,
            "balance": qround(balance),
            "owes": qround(-balance) if balance < 0 else qround(ZERO),
            "is_owed": qround(balance) if balance > 0 else qround(ZERO),
        }
        for user_id, balance in balances.items()
    ]


async def get_settlement_suggestions(db: AsyncSession, group_id: int):
    """
    Who should pay whom to bring every active member back to zero.

    Computed from the current balances on every call, the result is a
    snapshot and is never stored.
    """
    await get_active_group(db, group_id)
    balances = await get_member_balances(db, group_id)

    return [
        {"from_user": debtor, "to_user": creditor, "amount": amount}
        for debtor, creditor, amount in simplify_debts(balances)
    ]


async def is_group_settled(
    db: AsyncSession,
    group_id: int,
    tolerance: Decimal = SETTLE_EPSILON,
) -> bool:
    await get_active_group(db, group_id)
    balances = await get_member_balances(db, group_id)

    return all(abs(amount) <= tolerance for amount in balances.values())


async def get_derived_balances(db: AsyncSession, group_id: int) -> Dict[int, Decimal]:
    """
    Balances rebuilt from the live transactions:

        net_balance = total_paid - total_owed
    """
    paid_q = (
        select(
            Transaction.paid_by.label("user_id"),
            func.coalesce(func.sum(Transaction.amount), 0).label("paid"),
        )
        .where(Transaction.group_id == group_id, Transaction.is_deleted == False)
        .group_by(Transaction.paid_by)
    )

    paid_res = await db.execute(paid_q)
    paid_map = {row.user_id: Decimal(str(row.paid)) for row in paid_res}

    owed_q = (
        select(
            TransactionSplit.user_id,
            func.coalesce(func.sum(TransactionSplit.amount), 0).label("owed"),
        )
        .join(Transaction, Transaction.id == TransactionSplit.transaction_id)
        .where(Transaction.group_id == group_id, Transaction.is_deleted == False)
        .group_by(TransactionSplit.user_id)
    )

    owed_res = await db.execute(owed_q)
    owed_map = {row.user_id: Decimal(str(row.owed)) for row in owed_res}

    user_ids = set(paid_map) | set(owed_map)

    return {
        user_id: qround(paid_map.get(user_id, ZERO) - owed_map.get(user_id, ZERO))
        for user_id in user_ids
    }


async def audit_group_ledger(db: AsyncSession, group_id: int):
    """Compare stored member balances against the transaction history."""
    await get_active_group(db, group_id)

    stored = await get_member_balances(db, group_id)
    derived = await get_derived_balances(db, group_id)

    drift = []
    for user_id in sorted(set(stored) | set(derived)):
        s = qround(stored.get(user_id, ZERO))
        d = derived.get(user_id, ZERO)
        if s != d:
            drift.append({"user_id": user_id, "stored": s, "derived": d})

    balance_sum = qround(sum(stored.values(), ZERO))

    return {
        "group_id": group_id,
        "balance_sum": balance_sum,
        "consistent": not drift and abs(balance_sum) <= SETTLE_EPSILON,
        "drift": drift,
    }
