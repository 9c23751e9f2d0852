import logging
from typing import Iterable
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from splitledger.models.group import Group
from splitledger.models.group_member import GroupMember
from splitledger.core.exceptions import MemberHasBalance, NoOp, NotFound
from splitledger.core.notifier import Notifier, broadcast
from splitledger.core.utils import SETTLE_EPSILON
from splitledger.db.session import atomic

logger = logging.getLogger(__name__)


async def get_active_group(db: AsyncSession, group_id: int) -> Group:
    q = select(Group).where(Group.id == group_id, Group.is_active == True)
    res = await db.execute(q)
    group = res.scalar_one_or_none()

    if not group:
        raise NotFound(f"Group {group_id} not found")

    return group


async def ensure_active_members(db: AsyncSession, group_id: int, user_ids: Iterable[int]):
    user_ids = set(user_ids)

    q = select(GroupMember.user_id).where(
        GroupMember.group_id == group_id,
        GroupMember.user_id.in_(user_ids),
        GroupMember.is_active == True
    )
    res = await db.execute(q)
    missing = user_ids - set(res.scalars().all())

    if missing:
        raise NotFound(
            f"Users {sorted(missing)} are not active members of group {group_id}"
        )


async def _get_member(db: AsyncSession, group_id: int, user_id: int, lock: bool = False):
    q = (
        select(GroupMember)
        .where(
            GroupMember.group_id == group_id,
            GroupMember.user_id == user_id
        )
        .execution_options(populate_existing=True)
    )
    if lock:
        q = q.with_for_update()

    res = await db.execute(q)
    return res.scalar_one_or_none()


async def create_group(db: AsyncSession, name: str, creator_id: int, currency: str = "USD"):
    async with atomic(db):
        group = Group(name=name, currency=currency.upper(), created_by=creator_id)
        db.add(group)
        await db.flush()

        member = GroupMember(group_id=group.id, user_id=creator_id, role="admin")
        db.add(member)

    await db.refresh(group)
    logger.info("Group %s created by user %s", group.id, creator_id)
    return group


async def add_member(
    db: AsyncSession,
    group_id: int,
    user_id: int,
    role: str = "member",
    notifier: Notifier | None = None,
):
    async with atomic(db):
        await get_active_group(db, group_id)
        member = await _get_member(db, group_id, user_id, lock=True)

        if member and member.is_active:
            raise NoOp(f"User {user_id} is already a member of group {group_id}")

        if member:
            member.is_active = True
            member.role = role
        else:
            member = GroupMember(group_id=group_id, user_id=user_id, role=role)
            db.add(member)

    await db.refresh(member)
    logger.info("User %s joined group %s as %s", user_id, group_id, role)

    await broadcast(notifier, group_id, "member:joined", {
        "user_id": user_id,
        "role": role,
    })

    return member


async def update_member_role(
    db: AsyncSession,
    group_id: int,
    user_id: int,
    role: str,
    notifier: Notifier | None = None,
):
    async with atomic(db):
        await get_active_group(db, group_id)
        member = await _get_member(db, group_id, user_id, lock=True)

        if not member or not member.is_active:
            raise NotFound(f"User {user_id} is not an active member of group {group_id}")

        if member.role == role:
            raise NoOp(f"User {user_id} is already {role} of group {group_id}")

        old_role = member.role
        member.role = role

    await db.refresh(member)
    logger.info("User %s in group %s: role %s -> %s", user_id, group_id, old_role, role)

    await broadcast(notifier, group_id, "member:role_updated", {
        "user_id": user_id,
        "old_role": old_role,
        "role": role,
    })

    return member


async def deactivate_member(
    db: AsyncSession,
    group_id: int,
    user_id: int,
    notifier: Notifier | None = None,
):
    async with atomic(db):
        member = await _get_member(db, group_id, user_id, lock=True)

        if not member or not member.is_active:
            raise NotFound(f"User {user_id} is not an active member of group {group_id}")

        # removing a member with a balance would break the net-zero sum
        if abs(member.balance) >= SETTLE_EPSILON:
            raise MemberHasBalance(
                f"User {user_id} still has a balance of {member.balance} in group {group_id}"
            )

        member.is_active = False

    logger.info("User %s removed from group %s", user_id, group_id)

    await broadcast(notifier, group_id, "member:left", {"user_id": user_id})

    return member


async def update_group(
    db: AsyncSession,
    group_id: int,
    name: str | None = None,
    currency: str | None = None,
    notifier: Notifier | None = None,
):
    changes = {}

    async with atomic(db):
        group = await get_active_group(db, group_id)

        if name is not None and name != group.name:
            group.name = changes["name"] = name
        if currency is not None and currency.upper() != group.currency:
            group.currency = changes["currency"] = currency.upper()

    if not changes:
        return group

    await db.refresh(group)
    logger.info("Group %s updated: %s", group_id, changes)

    await broadcast(notifier, group_id, "group:updated", changes)

    return group


async def deactivate_group(db: AsyncSession, group_id: int):
    async with atomic(db):
        group = await get_active_group(db, group_id)
        group.is_active = False

    logger.info("Group %s deactivated", group_id)
    return group


async def list_members(db: AsyncSession, group_id: int):
    await get_active_group(db, group_id)

    q = (
        select(GroupMember)
        .where(
            GroupMember.group_id == group_id,
            GroupMember.is_active == True
        )
        .order_by(GroupMember.user_id)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(q)
    return result.scalars().all()
