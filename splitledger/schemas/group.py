from datetime import datetime
from decimal import Decimal
from typing import Literal
from pydantic import BaseModel, Field

class GroupCreate(BaseModel):
    name: str
    currency: str = Field(default="USD", min_length=3, max_length=3)
    creator_id: int | None = None

class GroupOut(BaseModel):
    id: int
    name: str
    currency: str
    created_by: int | None = None
    is_active: bool

    class Config:
        from_attributes = True

class GroupUpdate(BaseModel):
    name: str | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)

class MemberAdd(BaseModel):
    role: Literal["admin", "member"] = "member"

class MemberRoleUpdate(BaseModel):
    role: Literal["admin", "member"]

class GroupMemberOut(BaseModel):
    user_id: int
    group_id: int
    role: str
    balance: Decimal
    is_active: bool
    joined_at: datetime | None = None

    class Config:
        from_attributes = True
