from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from giphyblock.api.deps import bearer_token, get_current_user, get_db
from giphyblock.auth.service import (
    authenticate,
    create_session,
    create_user,
    get_user_role_ids,
    revoke_session,
)
from giphyblock.db.models import Role, User, role_members
from giphyblock.models.auth import LoginRequest, LoginResponse, RegisterRequest, RegisterResponse
from giphyblock.permissions import DEFAULT_ROLES

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/register", status_code=201)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)) -> RegisterResponse:
    existing = await db.execute(select(User).where(User.username == body.username))
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(status_code=409, detail={"error": {"code": "AUTH_FAILED", "message": "Username already taken."}})

    # Seed the default roles on first registration
    base = (await db.execute(select(Role).where(Role.position == 0))).scalar_one_or_none()
    first_user = base is None
    if first_user:
        for position, (name, perms) in enumerate(DEFAULT_ROLES):
            db.add(Role(name=name, position=position, permissions=perms))
        await db.flush()

    user, token = await create_user(db, body.username, body.password, body.display_name)

    # First registered user is the site owner
    if first_user:
        admin_role = (await db.execute(select(Role).where(Role.name == "administrator"))).scalar_one()
        await db.execute(role_members.insert().values(role_id=admin_role.id, user_id=user.id))

    await db.commit()

    return RegisterResponse(user_id=user.id, token=token)


@router.post("/login")
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)) -> LoginResponse:
    user = await authenticate(db, body.username, body.password)
    if user is None:
        raise HTTPException(status_code=401, detail={"error": {"code": "AUTH_FAILED", "message": "Invalid username or password."}})

    token = await create_session(db, user.id)
    role_ids = await get_user_role_ids(db, user.id)
    await db.commit()
    return LoginResponse(token=token, user_id=user.id, display_name=user.display_name, roles=role_ids)


@router.post("/logout", status_code=204)
async def logout(
    token: str = Depends(bearer_token),
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await revoke_session(db, token)
