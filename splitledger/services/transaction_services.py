import logging
from datetime import date as date_type
from decimal import Decimal
from typing import Dict, Mapping
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from splitledger.core.exceptions import InvalidAmount, NoOp, NotFound, SplitMismatch
from splitledger.core.notifier import Notifier, broadcast
from splitledger.core.splits import normalize_splits, resolve_splits, validate_splits
from splitledger.core.utils import qround, to_decimal
from splitledger.db.session import atomic
from splitledger.models.transaction import Transaction
from splitledger.models.transaction_split import TransactionSplit
from splitledger.schemas.transaction import transaction_payload
from splitledger.services.group_services import ensure_active_members, get_active_group
from splitledger.services.ledger import apply_transaction, reverse_transaction

logger = logging.getLogger(__name__)


def _prepare_splits(amount: Decimal, split_type: str, splits: Mapping):
    resolved = resolve_splits(split_type, amount, splits)
    validate_splits(amount, resolved)

    # the payer credit needs someone to carry it
    if not any(share > 0 for share in resolved.values()):
        raise SplitMismatch("At least one participant must owe a share")

    amount, resolved = normalize_splits(amount, resolved)

    if amount <= 0:
        raise InvalidAmount("Amount must be at least 0.01")

    return amount, resolved


def _replace_splits(txn: Transaction, new_splits: Dict[int, Decimal]):
    # update in place where the user stays, unique (transaction_id, user_id)
    existing = {s.user_id: s for s in txn.splits}

    for user_id, split in existing.items():
        if user_id not in new_splits:
            txn.splits.remove(split)

    for user_id, share in new_splits.items():
        if user_id in existing:
            existing[user_id].amount = share
        else:
            txn.splits.append(TransactionSplit(user_id=user_id, amount=share))


async def _get_live_transaction(db: AsyncSession, transaction_id: int, lock: bool = False) -> Transaction:
    q = (
        select(Transaction)
        .where(
            Transaction.id == transaction_id,
            Transaction.is_deleted == False
        )
        .execution_options(populate_existing=True)
    )
    if lock:
        q = q.with_for_update()

    res = await db.execute(q)
    txn = res.scalar_one_or_none()

    if not txn:
        raise NotFound(f"Transaction {transaction_id} not found")

    return txn


async def add_transaction(
    db: AsyncSession,
    group_id: int,
    paid_by: int,
    amount,
    splits: Mapping,
    *,
    split_type: str = "custom",
    description: str | None = None,
    date: date_type | None = None,
    notes: str | None = None,
    category_id: str | None = None,
    is_settlement: bool = False,
    created_by: int | None = None,
    notifier: Notifier | None = None,
) -> Transaction:
    amount = to_decimal(amount)
    if amount <= 0:
        raise InvalidAmount("Transaction amount must be positive")

    # nothing is written before the splits check out
    amount, resolved = _prepare_splits(amount, split_type, splits)

    async with atomic(db):
        await get_active_group(db, group_id)
        await ensure_active_members(db, group_id, {paid_by, *resolved})

        txn = Transaction(
            group_id=group_id,
            description=description,
            amount=amount,
            date=date or date_type.today(),
            paid_by=paid_by,
            split_type=split_type,
            notes=notes,
            category_id=category_id,
            is_settlement=is_settlement,
            created_by=created_by,
        )
        txn.splits = [
            TransactionSplit(user_id=user_id, amount=share)
            for user_id, share in resolved.items()
        ]

        db.add(txn)
        await db.flush()

        await apply_transaction(db, group_id, paid_by, amount, resolved)

    await db.refresh(txn)
    logger.info(
        "Transaction %s added to group %s: %s paid by %s",
        txn.id, group_id, amount, paid_by
    )

    event = "settlement:recorded" if is_settlement else "transaction:created"
    await broadcast(notifier, group_id, event, {
        "transaction": transaction_payload(txn),
        "created_by": created_by,
    })

    return txn


async def update_transaction(
    db: AsyncSession,
    transaction_id: int,
    *,
    amount=None,
    splits: Mapping | None = None,
    split_type: str | None = None,
    description: str | None = None,
    date: date_type | None = None,
    notes: str | None = None,
    category_id: str | None = None,
    updated_by: int | None = None,
    notifier: Notifier | None = None,
) -> Transaction:
    async with atomic(db):
        txn = await _get_live_transaction(db, transaction_id, lock=True)

        old_amount = to_decimal(txn.amount)
        old_splits = {uid: to_decimal(v) for uid, v in txn.split_map.items()}

        new_amount = to_decimal(amount) if amount is not None else old_amount
        if new_amount <= 0:
            raise InvalidAmount("Transaction amount must be positive")

        new_type = split_type or txn.split_type

        if splits is not None:
            # explicit splits are owed amounts unless a split type comes with them
            new_type = split_type or "custom"
            new_amount, new_splits = _prepare_splits(new_amount, new_type, splits)
        elif new_type != "custom" and (new_amount != old_amount or split_type is not None):
            # keep the participants, rescale their shares to the new amount
            basis = "equal" if new_type == "equal" else "shares"
            new_amount, new_splits = _prepare_splits(new_amount, basis, old_splits)
        else:
            new_amount, new_splits = _prepare_splits(new_amount, "custom", old_splits)

        await ensure_active_members(
            db, txn.group_id, {txn.paid_by, *old_splits, *new_splits}
        )

        await reverse_transaction(db, txn.group_id, txn.paid_by, old_amount, old_splits)
        await apply_transaction(db, txn.group_id, txn.paid_by, new_amount, new_splits)

        txn.amount = new_amount
        txn.split_type = new_type
        _replace_splits(txn, new_splits)

        if description is not None:
            txn.description = description
        if date is not None:
            txn.date = date
        if notes is not None:
            txn.notes = notes
        if category_id is not None:
            txn.category_id = category_id
        txn.updated_by = updated_by

    await db.refresh(txn)
    logger.info(
        "Transaction %s updated: %s -> %s", transaction_id, old_amount, new_amount
    )

    await broadcast(notifier, txn.group_id, "transaction:updated", {
        "transaction": transaction_payload(txn),
        "updated_by": updated_by,
    })

    return txn


async def delete_transaction(
    db: AsyncSession,
    transaction_id: int,
    *,
    deleted_by: int | None = None,
    notifier: Notifier | None = None,
):
    async with atomic(db):
        txn = await _get_live_transaction(db, transaction_id, lock=True)
        old_splits = {uid: to_decimal(v) for uid, v in txn.split_map.items()}

        # reversing against a removed member would skew the active balances
        await ensure_active_members(db, txn.group_id, {txn.paid_by, *old_splits})

        await reverse_transaction(db, txn.group_id, txn.paid_by, txn.amount, old_splits)

        txn.is_deleted = True
        txn.updated_by = deleted_by

    logger.info("Transaction %s deleted from group %s", transaction_id, txn.group_id)

    await broadcast(notifier, txn.group_id, "transaction:deleted", {
        "transaction_id": transaction_id,
        "deleted_by": deleted_by,
    })

    return {"status": "deleted", "transaction_id": transaction_id}


async def record_settlement(
    db: AsyncSession,
    group_id: int,
    from_user: int,
    to_user: int,
    amount,
    *,
    date: date_type | None = None,
    notes: str | None = None,
    created_by: int | None = None,
    notifier: Notifier | None = None,
) -> Transaction:
    """
    Record that from_user paid to_user outside the app.

    Booked as a transaction paid by from_user and owed entirely by
    to_user: the debtor moves up by amount, the creditor down by amount.
    """
    amount = to_decimal(amount)

    if amount <= 0:
        raise InvalidAmount("Settlement amount must be positive")

    if qround(amount) == 0:
        raise NoOp("Settlement amount rounds to zero")

    if from_user == to_user:
        raise NoOp("A member cannot settle with themselves")

    return await add_transaction(
        db,
        group_id,
        paid_by=from_user,
        amount=amount,
        splits={to_user: amount},
        split_type="custom",
        description=f"Settlement: {from_user} -> {to_user}",
        date=date,
        notes=notes or "Settlement payment",
        is_settlement=True,
        created_by=created_by,
        notifier=notifier,
    )


async def list_transactions(
    db: AsyncSession,
    group_id: int,
    include_settlements: bool = True,
):
    await get_active_group(db, group_id)

    q = (
        select(Transaction)
        .where(
            Transaction.group_id == group_id,
            Transaction.is_deleted == False
        )
        .order_by(
            Transaction.date.desc(),
            Transaction.created_at.desc(),
            Transaction.id.desc()
        )
    )
    if not include_settlements:
        q = q.where(Transaction.is_settlement == False)

    res = await db.execute(q)
    return res.scalars().all()


async def get_transaction(db: AsyncSession, transaction_id: int) -> Transaction:
    return await _get_live_transaction(db, transaction_id)
