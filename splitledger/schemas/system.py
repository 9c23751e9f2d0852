from decimal import Decimal
from pydantic import BaseModel

class HealthOut(BaseModel):
    status: str

class DbHealthOut(BaseModel):
    db: bool
    message: str | None = None
    error: str | None = None

class SystemMetrics(BaseModel):
    groups: int
    members: int
    transactions: int
    settlements: int
    outstanding: Decimal
