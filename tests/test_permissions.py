"""Tests for capability flags and resolution."""

from giphyblock.db.engine import get_session_factory
from giphyblock.db.models import Role, role_members
from giphyblock.permissions import (
    ADMINISTRATOR,
    ALL_PERMISSIONS,
    DEFAULT_ROLES,
    EDIT_POSTS,
    MANAGE_OPTIONS,
    PUBLISH_POSTS,
    READ,
    capability_names,
    has_permission,
    resolve_permissions,
)


def test_has_permission_single():
    assert has_permission(READ | EDIT_POSTS, EDIT_POSTS)
    assert not has_permission(READ, EDIT_POSTS)


def test_has_permission_multiple():
    perms = READ | EDIT_POSTS | PUBLISH_POSTS
    assert has_permission(perms, READ | EDIT_POSTS)
    assert not has_permission(perms, EDIT_POSTS | MANAGE_OPTIONS)


def test_capability_names():
    assert capability_names(READ | EDIT_POSTS) == ["read", "edit_posts"]
    assert capability_names(0) == []


def test_default_roles_ordering():
    names = [name for name, _ in DEFAULT_ROLES]
    assert names == ["subscriber", "contributor", "author", "editor", "administrator"]
    # Every role above subscriber can edit posts
    for _, perms in DEFAULT_ROLES[1:4]:
        assert has_permission(perms, EDIT_POSTS)
    assert not has_permission(DEFAULT_ROLES[0][1], EDIT_POSTS)


async def _seed(session):
    for position, (name, perms) in enumerate(DEFAULT_ROLES):
        session.add(Role(name=name, position=position, permissions=perms))
    await session.flush()


async def test_resolve_base_role_only(db):
    async with get_session_factory()() as session:
        await _seed(session)
        assert await resolve_permissions(session, 42) == READ


async def test_resolve_no_roles_at_all(db):
    async with get_session_factory()() as session:
        assert await resolve_permissions(session, 1) == 0


async def test_resolve_assigned_role(db):
    from sqlalchemy import select

    async with get_session_factory()() as session:
        await _seed(session)
        author = (await session.execute(select(Role).where(Role.name == "author"))).scalar_one()
        await session.execute(role_members.insert().values(role_id=author.id, user_id=7))
        resolved = await resolve_permissions(session, 7)
        assert has_permission(resolved, EDIT_POSTS | PUBLISH_POSTS)
        assert not has_permission(resolved, MANAGE_OPTIONS)


async def test_resolve_administrator_gets_everything(db):
    from sqlalchemy import select

    async with get_session_factory()() as session:
        await _seed(session)
        admin = (await session.execute(select(Role).where(Role.name == "administrator"))).scalar_one()
        await session.execute(role_members.insert().values(role_id=admin.id, user_id=1))
        assert await resolve_permissions(session, 1) == ALL_PERMISSIONS
        assert has_permission(ALL_PERMISSIONS, ADMINISTRATOR)
