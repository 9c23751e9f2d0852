from datetime import date as date_type, datetime
from decimal import Decimal
from typing import Dict, Literal
from pydantic import BaseModel, Field

SplitType = Literal["equal", "custom", "percentage", "shares"]

class TransactionCreate(BaseModel):
    description: str | None = None
    amount: Decimal
    paid_by: int
    split_type: SplitType = "custom"
    # user_id -> owed amount / percentage / weight, depending on split_type
    splits: Dict[int, Decimal]
    date: date_type | None = None
    notes: str | None = None
    category_id: str | None = None

class TransactionUpdate(BaseModel):
    description: str | None = None
    amount: Decimal | None = None
    split_type: SplitType | None = None
    splits: Dict[int, Decimal] | None = None
    date: date_type | None = None
    notes: str | None = None
    category_id: str | None = None

class TransactionOut(BaseModel):
    id: int
    group_id: int
    description: str | None = None
    amount: Decimal
    date: date_type | None = None
    paid_by: int
    split_type: str
    splits: Dict[int, Decimal] = Field(validation_alias="split_map")
    notes: str | None = None
    category_id: str | None = None
    is_settlement: bool
    created_by: int | None = None
    updated_by: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True

class TransactionDeleted(BaseModel):
    status: str
    transaction_id: int


def transaction_payload(txn) -> dict:
    return TransactionOut.model_validate(txn).model_dump(mode="json")
