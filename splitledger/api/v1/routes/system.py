from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from splitledger.core.dependencies import get_db
from splitledger.schemas.system import DbHealthOut, HealthOut, SystemMetrics
from splitledger.services.system_services import check_db_service, system_health, system_metrics

router = APIRouter()

@router.get("/health", response_model=HealthOut)
async def health():
    return await system_health()

@router.get("/health/db", response_model=DbHealthOut, responses={503: {"model": DbHealthOut}})
async def db_health():
    status = await check_db_service()
    if not status["db"]:
        return JSONResponse(status_code=503, content=status)

    return status

@router.get("/metrics", response_model=SystemMetrics)
async def ledger_metrics(db: AsyncSession = Depends(get_db)):
    return await system_metrics(db)
