from collections.abc import AsyncGenerator

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from giphyblock.auth.service import get_user_by_token
from giphyblock.db.engine import get_session_factory
from giphyblock.db.models import User
from giphyblock.permissions import CAPABILITY_NAMES, has_permission, resolve_permissions


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    factory = get_session_factory()
    async with factory() as session:
        yield session


def bearer_token(authorization: str = Header()) -> str:
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail={"error": {"code": "AUTH_FAILED", "message": "Invalid authorization header."}})
    return authorization[7:]


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    token: str = Depends(bearer_token),
) -> User:
    user = await get_user_by_token(db, token)
    if user is None:
        raise HTTPException(status_code=401, detail={"error": {"code": "AUTH_EXPIRED", "message": "Session token expired or invalid."}})

    if not user.active:
        raise HTTPException(status_code=403, detail={"error": {"code": "DEACTIVATED", "message": "Account is deactivated."}})

    return user


def require_permission(perm: int):
    """FastAPI dependency factory that checks resolved capabilities and raises 403."""

    async def checker(
        db: AsyncSession = Depends(get_db),
        user: User = Depends(get_current_user),
    ) -> User:
        resolved = await resolve_permissions(db, user.id)
        if not has_permission(resolved, perm):
            raise HTTPException(
                status_code=403,
                detail={"error": {
                    "code": "MISSING_PERMISSIONS",
                    "message": "You lack the required permissions.",
                    "missing_permission": CAPABILITY_NAMES.get(perm),
                }},
            )
        return user

    return Depends(checker)
