from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from splitledger.core.dependencies import get_actor_id, get_db, get_notifier
from splitledger.core.notifier import Notifier
from splitledger.schemas.transaction import TransactionCreate, TransactionDeleted, TransactionOut, TransactionUpdate
from splitledger.services.transaction_services import (
    add_transaction,
    delete_transaction,
    get_transaction,
    list_transactions,
    update_transaction,
)

router = APIRouter()

@router.post("/groups/{group_id}/transactions", response_model=TransactionOut, status_code=201)
async def create(
    group_id: int,
    data: TransactionCreate,
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    actor_id: int | None = Depends(get_actor_id),
):
    return await add_transaction(
        db,
        group_id,
        paid_by=data.paid_by,
        amount=data.amount,
        splits=data.splits,
        split_type=data.split_type,
        description=data.description,
        date=data.date,
        notes=data.notes,
        category_id=data.category_id,
        created_by=actor_id,
        notifier=notifier,
    )

@router.get("/groups/{group_id}/transactions", response_model=list[TransactionOut])
async def group_transactions(
    group_id: int,
    include_settlements: bool = True,
    db: AsyncSession = Depends(get_db),
):
    return await list_transactions(db, group_id, include_settlements=include_settlements)

@router.get("/transactions/{transaction_id}", response_model=TransactionOut)
async def fetch(transaction_id: int, db: AsyncSession = Depends(get_db)):
    return await get_transaction(db, transaction_id)

@router.patch("/transactions/{transaction_id}", response_model=TransactionOut)
async def edit(
    transaction_id: int,
    data: TransactionUpdate,
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    actor_id: int | None = Depends(get_actor_id),
):
    return await update_transaction(
        db,
        transaction_id,
        amount=data.amount,
        splits=data.splits,
        split_type=data.split_type,
        description=data.description,
        date=data.date,
        notes=data.notes,
        category_id=data.category_id,
        updated_by=actor_id,
        notifier=notifier,
    )

@router.delete("/transactions/{transaction_id}", response_model=TransactionDeleted)
async def remove(
    transaction_id: int,
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    actor_id: int | None = Depends(get_actor_id),
):
    return await delete_transaction(db, transaction_id, deleted_by=actor_id, notifier=notifier)
