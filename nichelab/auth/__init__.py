"""
Authentication

Supabase is the single authentication capability:
- Client sessions (sign up / sign in / sign out) through SupabaseIdentityService
- API requests carry a Supabase JWT, verified locally
- A profile row (users table) is reconciled for every identity

Usage:
    @router.get("/niches")
    async def list_niches(identity: RequestIdentity = Depends(get_identity)):
        ...
"""

from .config import AuthConfig, get_auth_config
from .identity import (
    AuthUser,
    AuthSession,
    RequestIdentity,
    FileSessionStore,
    SupabaseIdentityService,
    SIGNED_IN,
    SIGNED_OUT,
)
from .jwt import JWTError, verify_supabase_token, user_from_payload
from .models import User
from .sync import sync_profile, get_profile
from .dependencies import get_current_user, get_current_user_optional, get_identity

__all__ = [
    "AuthConfig",
    "get_auth_config",
    "AuthUser",
    "AuthSession",
    "RequestIdentity",
    "FileSessionStore",
    "SupabaseIdentityService",
    "SIGNED_IN",
    "SIGNED_OUT",
    "JWTError",
    "verify_supabase_token",
    "user_from_payload",
    "User",
    "sync_profile",
    "get_profile",
    "get_current_user",
    "get_current_user_optional",
    "get_identity",
]
