"""
Tests for login, logout and account provisioning.
"""

import asyncio

import pytest

from core.errors import (
    ForbiddenError,
    InvalidCredentialsError,
    InvalidInputError,
    UnauthenticatedError,
)
from core.storage.base import UserRecord, UserRole
from manager.accounts import ensure_editor


@pytest.mark.asyncio
async def test_login_unknown_user_provisions_one_editor(orchestrator, store):
    users_before = len(orchestrator.state.users)
    
    token, user = await orchestrator.accounts.login("newuser", "pw")
    
    assert user.role == UserRole.EDITOR
    assert user.username == "newuser"
    assert user.email is None
    assert len(orchestrator.state.users) == users_before + 1
    assert orchestrator.sessions.resolve(token) is user
    # Persisted before login returned
    assert any(u["username"] == "newuser" for u in store.saved["users"])


@pytest.mark.asyncio
async def test_login_existing_user_with_right_password(orchestrator):
    _, first = await orchestrator.accounts.login("newuser", "pw")
    users_before = len(orchestrator.state.users)
    
    token, second = await orchestrator.accounts.login("newuser", "pw")
    
    assert second.id == first.id
    assert len(orchestrator.state.users) == users_before
    assert orchestrator.sessions.resolve(token).id == first.id


@pytest.mark.asyncio
async def test_login_wrong_password(orchestrator):
    await orchestrator.accounts.login("existing", "pw")
    users_before = len(orchestrator.state.users)
    sessions_before = orchestrator.sessions.active_count
    
    with pytest.raises(InvalidCredentialsError):
        await orchestrator.accounts.login("existing", "wrongpw")
    
    assert len(orchestrator.state.users) == users_before
    assert orchestrator.sessions.active_count == sessions_before


@pytest.mark.asyncio
async def test_login_seeded_admin(orchestrator):
    token, user = await orchestrator.accounts.login("admin", "admin")
    
    assert user.role == UserRole.ADMIN
    assert orchestrator.sessions.resolve(token) is user


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "username, password",
    [("", "pw"), ("user", ""), ("   ", "pw"), ("user", "  "), (None, None)],
)
async def test_login_blank_fields(orchestrator, username, password):
    users_before = len(orchestrator.state.users)
    
    with pytest.raises(InvalidInputError):
        await orchestrator.accounts.login(username, password)
    
    assert len(orchestrator.state.users) == users_before


@pytest.mark.asyncio
async def test_login_trims_credentials(orchestrator):
    _, created = await orchestrator.accounts.login("  spaced  ", "  pw  ")
    _, again = await orchestrator.accounts.login("spaced", "pw")
    
    assert created.username == "spaced"
    assert again.id == created.id


@pytest.mark.asyncio
async def test_logout_revokes_only_own_token(orchestrator):
    mine, _ = await orchestrator.accounts.login("editor", "pw")
    other, _ = await orchestrator.accounts.login("editor", "pw")
    
    assert orchestrator.accounts.logout(mine) is True
    
    assert orchestrator.sessions.resolve(mine) is None
    assert orchestrator.sessions.resolve(other) is not None


@pytest.mark.asyncio
async def test_logout_without_token_is_true(orchestrator):
    assert orchestrator.accounts.logout(None) is True
    assert orchestrator.accounts.logout("unknown") is True


@pytest.mark.parametrize("role", [UserRole.EDITOR, UserRole.ADMIN])
def test_ensure_editor_accepts_editing_roles(role):
    user = UserRecord(id="u", username="u", password="p", role=role)
    
    assert ensure_editor(user) is user


def test_ensure_editor_rejects_missing_user():
    with pytest.raises(UnauthenticatedError):
        ensure_editor(None)


def test_ensure_editor_rejects_other_roles():
    viewer = UserRecord(id="v", username="v", password="p", role="VIEWER")
    
    with pytest.raises(ForbiddenError):
        ensure_editor(viewer)


@pytest.mark.asyncio
async def test_concurrent_first_logins_create_one_account(orchestrator):
    results = await asyncio.gather(
        orchestrator.accounts.login("racer", "pw"),
        orchestrator.accounts.login("racer", "pw"),
    )
    
    (first_token, first), (second_token, second) = results
    assert first.id == second.id
    assert first_token != second_token
    assert sum(u.username == "racer" for u in orchestrator.state.users.values()) == 1
