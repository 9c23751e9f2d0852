from pydantic import BaseModel
from decimal import Decimal

class MemberBalance(BaseModel):
    user_id: int
    balance: Decimal
    owes: Decimal
    is_owed: Decimal

class BalanceDrift(BaseModel):
    user_id: int
    stored: Decimal
    derived: Decimal

class LedgerAudit(BaseModel):
    group_id: int
    balance_sum: Decimal
    consistent: bool
    drift: list[BalanceDrift]
