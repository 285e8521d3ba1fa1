"""Capability bit flags, default roles, and resolution."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from giphyblock.db.models import Role, role_members

# --- Bit flags ---

READ               = 1 << 0
EDIT_POSTS         = 1 << 1
PUBLISH_POSTS      = 1 << 2
UPLOAD_FILES       = 1 << 3
EDIT_OTHERS_POSTS  = 1 << 4
MANAGE_OPTIONS     = 1 << 5
PROMOTE_USERS      = 1 << 6
ADMINISTRATOR      = 1 << 62

ALL_PERMISSIONS = (1 << 63) - 1

CAPABILITY_NAMES: dict[int, str] = {
    READ: "read",
    EDIT_POSTS: "edit_posts",
    PUBLISH_POSTS: "publish_posts",
    UPLOAD_FILES: "upload_files",
    EDIT_OTHERS_POSTS: "edit_others_posts",
    MANAGE_OPTIONS: "manage_options",
    PROMOTE_USERS: "promote_users",
    ADMINISTRATOR: "administrator",
}

# Seeded on first registration, lowest position first.  The position-0 role
# is the base role every user implicitly holds.
DEFAULT_ROLES: list[tuple[str, int]] = [
    ("subscriber", READ),
    ("contributor", READ | EDIT_POSTS),
    ("author", READ | EDIT_POSTS | PUBLISH_POSTS | UPLOAD_FILES),
    ("editor", READ | EDIT_POSTS | PUBLISH_POSTS | UPLOAD_FILES | EDIT_OTHERS_POSTS),
    ("administrator", ADMINISTRATOR),
]


async def resolve_permissions(db: AsyncSession, user_id: int) -> int:
    """Resolve effective capabilities for *user_id*: base role OR'd with assigned roles."""
    base_result = await db.execute(select(Role).where(Role.position == 0))
    base_role = base_result.scalar_one_or_none()
    resolved = base_role.permissions if base_role else 0

    roles_result = await db.execute(
        select(Role.permissions)
        .join(role_members, role_members.c.role_id == Role.id)
        .where(role_members.c.user_id == user_id)
    )
    for perms in roles_result.scalars().all():
        resolved |= perms

    if resolved & ADMINISTRATOR:
        return ALL_PERMISSIONS
    return resolved


def has_permission(resolved: int, required: int) -> bool:
    """Return True if *resolved* contains all bits in *required*."""
    return (resolved & required) == required


def capability_names(resolved: int) -> list[str]:
    return [name for bit, name in CAPABILITY_NAMES.items() if resolved & bit]
