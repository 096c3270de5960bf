"""
Auth guard - request identity and role checks.

Every request gets a RequestContext carrying the bearer token (if any)
and the user it resolves to (if any). Handlers that need more than that
depend on get_current_editor.
"""

import re
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header

from api.dependencies import get_orchestrator
from core.errors import UnauthenticatedError
from core.storage.base import UserRecord
from manager.accounts import ensure_editor
from manager.orchestrator import WikiOrchestrator


_BEARER_PREFIX = re.compile(r"^Bearer\s+", re.IGNORECASE)


@dataclass
class RequestContext:
    token: Optional[str] = None
    user: Optional[UserRecord] = None


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Token from an "Authorization: Bearer <token>" header value."""
    if not authorization:
        return None
    token = _BEARER_PREFIX.sub("", authorization).strip()
    return token or None


def require_authenticated(ctx: RequestContext) -> UserRecord:
    if ctx.user is None:
        raise UnauthenticatedError()
    return ctx.user


def require_editor_role(ctx: RequestContext) -> UserRecord:
    """Authenticated user whose role may mutate pages, else Forbidden."""
    return ensure_editor(require_authenticated(ctx))


async def get_request_context(
    authorization: Optional[str] = Header(default=None),
    orchestrator: WikiOrchestrator = Depends(get_orchestrator),
) -> RequestContext:
    token = extract_bearer_token(authorization)
    return RequestContext(token=token, user=orchestrator.sessions.resolve(token))


async def get_current_editor(
    ctx: RequestContext = Depends(get_request_context),
) -> UserRecord:
    return require_editor_role(ctx)
