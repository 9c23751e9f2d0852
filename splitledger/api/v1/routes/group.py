from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from splitledger.core.dependencies import get_actor_id, get_db, get_notifier
from splitledger.core.notifier import Notifier
from splitledger.services.group_services import (
    add_member,
    create_group,
    deactivate_member,
    list_members,
    update_group,
    update_member_role,
)
from splitledger.schemas.group import (
    GroupCreate,
    GroupMemberOut,
    GroupOut,
    GroupUpdate,
    MemberAdd,
    MemberRoleUpdate,
)

router = APIRouter()

@router.post("/", response_model=GroupOut, status_code=201)
async def create_new_group(
    data: GroupCreate,
    db: AsyncSession = Depends(get_db),
    actor_id: int | None = Depends(get_actor_id)
):
    creator_id = data.creator_id or actor_id
    if creator_id is None:
        raise HTTPException(400, "creator_id or X-User-Id header is required")

    return await create_group(db, data.name, creator_id, currency=data.currency)

@router.patch("/{group_id}", response_model=GroupOut)
async def edit_group(
    group_id: int,
    data: GroupUpdate,
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier)
):
    return await update_group(
        db, group_id, name=data.name, currency=data.currency, notifier=notifier
    )

@router.post("/{group_id}/members/{user_id}", response_model=GroupMemberOut, status_code=201)
async def add_user_to_group(
    group_id: int,
    user_id: int,
    data: MemberAdd | None = None,
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier)
):
    role = data.role if data else "member"
    return await add_member(db, group_id, user_id, role=role, notifier=notifier)

@router.patch("/{group_id}/members/{user_id}", response_model=GroupMemberOut)
async def change_member_role(
    group_id: int,
    user_id: int,
    data: MemberRoleUpdate,
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier)
):
    return await update_member_role(db, group_id, user_id, data.role, notifier=notifier)

@router.delete("/{group_id}/members/{user_id}", response_model=GroupMemberOut)
async def remove_user_from_group(
    group_id: int,
    user_id: int,
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier)
):
    return await deactivate_member(db, group_id, user_id, notifier=notifier)

@router.get("/{group_id}/members", response_model=list[GroupMemberOut])
async def group_members(group_id: int, db: AsyncSession = Depends(get_db)):
    return await list_members(db, group_id)
