from contextlib import asynccontextmanager
from fastapi import FastAPI
from splitledger.api.v1.routes.group import router as group_router
from splitledger.api.v1.routes.settlement import router as settlement_router
from splitledger.api.v1.routes.system import router as system_router
from splitledger.api.v1.routes.transaction import router as transaction_router
from splitledger.core.config import settings
from splitledger.core.db_check import wait_for_db
from splitledger.core.logging_config import configure_logging
from splitledger.core.notifier import build_notifier

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    await wait_for_db(retries=settings.DB_CONNECT_RETRIES)
    app.state.notifier = build_notifier()
    yield


app = FastAPI(title="Splitledger", lifespan=lifespan)

@app.get("/")
async def root():
    return {"message": "Splitledger is live"}

app.include_router(system_router, prefix="/api/v1/system")
app.include_router(group_router, prefix="/api/v1/groups")
app.include_router(settlement_router, prefix="/api/v1/groups")
app.include_router(transaction_router, prefix="/api/v1")
