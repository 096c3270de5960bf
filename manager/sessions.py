"""
Session manager - ephemeral token to user-id table.

Tokens are opaque random strings that live for the lifetime of the
process. A user may hold any number of tokens at once.
"""

import secrets
from typing import Callable, Optional

from core.logging import get_logger
from core.storage.base import UserRecord


logger = get_logger(__name__)

UserLookup = Callable[[str], Optional[UserRecord]]


class SessionManager:
    """
    Issues, resolves and revokes session tokens.
    
    Only the token -> user id mapping is kept here; users are resolved
    through the supplied lookup so a token always yields the current
    version of the account.
    """
    
    TOKEN_BYTES = 24
    
    def __init__(self, user_lookup: UserLookup):
        self._user_lookup = user_lookup
        self._sessions: dict[str, str] = {}
    
    @property
    def active_count(self) -> int:
        return len(self._sessions)
    
    def issue(self, user_id: str) -> str:
        """Create a new token bound to user_id."""
        token = secrets.token_urlsafe(self.TOKEN_BYTES)
        self._sessions[token] = user_id
        logger.debug("Session issued", user_id=user_id)
        return token
    
    def revoke(self, token: Optional[str]) -> bool:
        """Drop exactly this token. Returns False if it was not active."""
        if not token:
            return False
        user_id = self._sessions.pop(token, None)
        if user_id is None:
            return False
        logger.debug("Session revoked", user_id=user_id)
        return True
    
    def resolve(self, token: Optional[str]) -> Optional[UserRecord]:
        if not token:
            return None
        user_id = self._sessions.get(token)
        if user_id is None:
            return None
        return self._user_lookup(user_id)
