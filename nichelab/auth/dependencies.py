"""
FastAPI Authentication Dependencies

Resolve the acting identity from the bearer token and hand services an
identity provider scoped to the request.
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from nichelab.auth.config import get_auth_config
from nichelab.auth.identity import AuthUser, RequestIdentity
from nichelab.auth.jwt import JWTError, user_from_payload, verify_supabase_token
from nichelab.auth.sync import sync_profile
from nichelab.database.session import get_db_context

logger = logging.getLogger(__name__)

# HTTP Bearer token extraction
security = HTTPBearer(auto_error=False)


def _dev_user() -> AuthUser:
    config = get_auth_config()
    return AuthUser(id=config.dev_user_id, email=config.dev_user_email, name="Development User")


def _reconcile(user: AuthUser) -> AuthUser:
    with get_db_context() as db:
        sync_profile(db, user)
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthUser:
    """
    Get the current authenticated identity.

    Verifies the Supabase JWT and makes sure a profile row exists.

    Raises:
        HTTPException 401: missing or invalid token
    """
    config = get_auth_config()

    # Local development without Supabase
    if not config.auth_enabled:
        return _reconcile(_dev_user())

    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = verify_supabase_token(credentials.credentials, config)
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )

    return _reconcile(user_from_payload(payload))


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[AuthUser]:
    """Current identity if the token verifies, None otherwise."""
    config = get_auth_config()

    if not config.auth_enabled:
        return _reconcile(_dev_user())

    if not credentials:
        return None

    try:
        payload = verify_supabase_token(credentials.credentials, config)
    except JWTError:
        return None
    return _reconcile(user_from_payload(payload))


async def get_identity(
    user: Optional[AuthUser] = Depends(get_current_user_optional),
) -> RequestIdentity:
    """
    Identity provider for services.

    Anonymous requests get an empty identity so services answer with their
    own "User not authenticated" envelope.
    """
    return RequestIdentity(user)
