from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from giphyblock.api.deps import get_current_user, get_db, require_permission
from giphyblock.db.models import Role, User, role_members
from giphyblock.models.users import RoleAssignRequest, UserResponse
from giphyblock.permissions import PROMOTE_USERS, capability_names, resolve_permissions

router = APIRouter(prefix="/api/v1/users", tags=["users"])


async def _user_response(db: AsyncSession, user: User) -> UserResponse:
    result = await db.execute(
        select(Role.name)
        .join(role_members, role_members.c.role_id == Role.id)
        .where(role_members.c.user_id == user.id)
        .order_by(Role.position)
    )
    resolved = await resolve_permissions(db, user.id)
    return UserResponse(
        user_id=user.id,
        username=user.username,
        display_name=user.display_name,
        roles=list(result.scalars().all()),
        capabilities=capability_names(resolved),
    )


@router.get("/@me")
async def get_me(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    return await _user_response(db, user)


@router.put("/{user_id}/role")
async def set_role(
    user_id: int,
    body: RoleAssignRequest,
    db: AsyncSession = Depends(get_db),
    _: User = require_permission(PROMOTE_USERS),
) -> UserResponse:
    target = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
    if target is None:
        raise HTTPException(status_code=404, detail={"error": {"code": "USER_NOT_FOUND", "message": "User does not exist."}})

    role = (await db.execute(select(Role).where(Role.name == body.role))).scalar_one_or_none()
    if role is None:
        raise HTTPException(status_code=404, detail={"error": {"code": "ROLE_NOT_FOUND", "message": f"Unknown role {body.role!r}."}})

    # A user holds exactly one assigned role, as in the block editor's host
    await db.execute(delete(role_members).where(role_members.c.user_id == target.id))
    await db.execute(role_members.insert().values(role_id=role.id, user_id=target.id))
    await db.commit()
    return await _user_response(db, target)
