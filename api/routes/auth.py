"""
Session endpoints.

- POST /auth/login - Issue a token (provisions unknown usernames)
- POST /auth/logout - Revoke the caller's token
- GET /me - Current user, or null
"""

from typing import Optional

from fastapi import APIRouter, Depends

from api.auth import RequestContext, get_request_context
from api.dependencies import get_orchestrator
from api.schemas.user import AuthPayload, LoginRequest, UserResponse
from core.logging import get_logger
from manager.orchestrator import WikiOrchestrator


logger = get_logger(__name__)
router = APIRouter(prefix="/api/v1", tags=["Auth"])


@router.post("/auth/login", response_model=AuthPayload)
async def login(
    request: LoginRequest,
    orchestrator: WikiOrchestrator = Depends(get_orchestrator),
) -> AuthPayload:
    """
    Log in with username and password.
    
    An unknown username creates a new EDITOR account with the given
    password (demo behaviour). Blank fields fail with INVALID_INPUT, a
    wrong password for an existing account with INVALID_CREDENTIALS.
    """
    logger.info("Login requested", username=request.username)
    
    token, user = await orchestrator.accounts.login(request.username, request.password)
    return AuthPayload(token=token, user=UserResponse.from_record(user))


@router.post("/auth/logout", response_model=bool)
async def logout(
    ctx: RequestContext = Depends(get_request_context),
    orchestrator: WikiOrchestrator = Depends(get_orchestrator),
) -> bool:
    """Invalidate the caller's own token. Always returns true."""
    logger.info(
        "Logout requested",
        user_id=ctx.user.id if ctx.user else None,
    )
    return orchestrator.accounts.logout(ctx.token)


@router.get("/me", response_model=Optional[UserResponse])
async def me(
    ctx: RequestContext = Depends(get_request_context),
) -> Optional[UserResponse]:
    """The user bound to the bearer token, or null."""
    return UserResponse.from_record(ctx.user)
