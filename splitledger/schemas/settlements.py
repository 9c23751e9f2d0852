from pydantic import BaseModel
from datetime import date as date_type
from decimal import Decimal

class Settlement(BaseModel):
    from_user: int
    to_user: int
    amount: Decimal

class SettlementCreate(BaseModel):
    from_user: int
    to_user: int
    amount: Decimal
    date: date_type | None = None
    notes: str | None = None
