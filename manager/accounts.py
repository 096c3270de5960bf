"""
User accounts and login.

Login doubles as sign-up: an unknown username is provisioned as a new
EDITOR account on first use. This is demo behaviour, not a general
pattern.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from core.config import Settings
from core.errors import (
    ForbiddenError,
    InvalidCredentialsError,
    InvalidInputError,
    UnauthenticatedError,
)
from core.logging import get_logger
from core.storage.base import UserRecord, UserRole


if TYPE_CHECKING:
    from manager.orchestrator import WikiOrchestrator
    from manager.state import WikiState


logger = get_logger(__name__)

EDITOR_ROLES = frozenset({UserRole.EDITOR, UserRole.ADMIN})


def new_id() -> str:
    return uuid.uuid4().hex


def ensure_editor(user: Optional[UserRecord]) -> UserRecord:
    """
    Return user if it may create, update or delete pages.
    
    Raises UnauthenticatedError when there is no user at all and
    ForbiddenError when the role is not an editing role.
    """
    if user is None:
        raise UnauthenticatedError()
    if user.role not in EDITOR_ROLES:
        raise ForbiddenError()
    return user


def build_seed_admin(settings: Settings, now: datetime) -> UserRecord:
    """The single ADMIN account created for an empty user collection."""
    return UserRecord(
        id=new_id(),
        username=settings.seed_admin_username,
        password=settings.seed_admin_password,
        role=UserRole.ADMIN,
        email=settings.seed_admin_email,
        created_at=now,
        updated_at=now,
    )


class AccountService:
    """Login/logout on top of the orchestrator's state and session table."""
    
    def __init__(self, orchestrator: "WikiOrchestrator"):
        self._orchestrator = orchestrator
    
    async def login(self, username: str, password: str) -> tuple[str, UserRecord]:
        """
        Authenticate and issue a session token.
        
        Args:
            username: Account name; surrounding whitespace is ignored
            password: Plaintext password; surrounding whitespace is ignored
        
        Returns:
            (token, user)
        
        Raises:
            InvalidInputError: username or password is blank
            InvalidCredentialsError: username exists with another password
        """
        name = (username or "").strip()
        secret = (password or "").strip()
        if not name or not secret:
            raise InvalidInputError("username/password required")
        
        user = self._orchestrator.state.find_user_by_username(name)
        if user is None:
            user = await self._provision(name, secret)
        
        if user.password != secret:
            logger.info("Login rejected", username=name)
            raise InvalidCredentialsError()
        
        token = self._orchestrator.sessions.issue(user.id)
        logger.info("Login succeeded", username=name, user_id=user.id)
        return token, user
    
    def logout(self, token: Optional[str]) -> bool:
        """Invalidate the caller's own token. Always True."""
        if self._orchestrator.sessions.revoke(token):
            logger.info("Logout")
        return True
    
    async def _provision(self, username: str, password: str) -> UserRecord:
        now = self._orchestrator.now()
        
        def create_user(draft: "WikiState") -> UserRecord:
            # A concurrent first login may have created it while we waited
            existing = draft.find_user_by_username(username)
            if existing is not None:
                return existing
            user = UserRecord(
                id=new_id(),
                username=username,
                password=password,
                role=UserRole.EDITOR,
                email=None,
                created_at=now,
                updated_at=now,
            )
            draft.users[user.id] = user
            return user
        
        user = await self._orchestrator.commit(create_user)
        logger.info("Editor account provisioned", username=username, user_id=user.id)
        return user
