from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from splitledger.core.dependencies import get_actor_id, get_db, get_notifier
from splitledger.core.notifier import Notifier
from splitledger.schemas.balances import LedgerAudit, MemberBalance
from splitledger.schemas.settlements import Settlement, SettlementCreate
from splitledger.schemas.transaction import TransactionOut
from splitledger.services.settlement_service import audit_group_ledger, get_balances, get_settlement_suggestions
from splitledger.services.transaction_services import record_settlement

router = APIRouter()


@router.post("/{group_id}/settlements", response_model=TransactionOut, status_code=201)
async def settle_up(
    group_id: int,
    data: SettlementCreate,
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    actor_id: int | None = Depends(get_actor_id),
):
    return await record_settlement(
        db,
        group_id,
        from_user=data.from_user,
        to_user=data.to_user,
        amount=data.amount,
        date=data.date,
        notes=data.notes,
        created_by=actor_id,
        notifier=notifier,
    )


@router.get("/{group_id}/balances", response_model=list[MemberBalance])
async def balances(group_id: int, db: AsyncSession = Depends(get_db)):
    return await get_balances(db, group_id)


@router.get("/{group_id}/settlements/suggestions", response_model=list[Settlement])
async def suggestions(group_id: int, db: AsyncSession = Depends(get_db)):
    return await get_settlement_suggestions(db, group_id)


@router.get("/{group_id}/ledger/audit", response_model=LedgerAudit)
async def audit(group_id: int, db: AsyncSession = Depends(get_db)):
    return await audit_group_ledger(db, group_id)
