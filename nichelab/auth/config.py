"""
Authentication Configuration

Where tokens come from (the Supabase project), how they are verified, and
which identity stands in when auth is switched off for local development.

Environment variables:
- SUPABASE_URL / SUPABASE_ANON_KEY: project endpoint and public key
- SUPABASE_JWT_SECRET: HS256 verification secret
- JWT_ALGORITHM: HS256 (default) or an asymmetric algorithm verified via JWKS
- AUTH_ENABLED: "false" to act as the development user
- DEV_USER_ID / DEV_USER_EMAIL: that development user
"""

import os
from typing import Optional
from functools import lru_cache
from pydantic_settings import BaseSettings

DEFAULT_DEV_USER_ID = "00000000-0000-4000-8000-000000000001"


class AuthConfig(BaseSettings):
    """Token verification and identity settings."""

    # Supabase project
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_jwt_secret: str = ""

    # Verification
    jwt_algorithm: str = "HS256"
    jwt_audience: str = "authenticated"

    # Off: every request runs as the development user
    auth_enabled: bool = True
    dev_user_id: str = DEFAULT_DEV_USER_ID
    dev_user_email: str = "dev@nichelab.local"

    class Config:
        env_prefix = ""
        extra = "ignore"

    @property
    def supabase_project_ref(self) -> Optional[str]:
        """Subdomain of the project URL (https://abc.supabase.co -> abc)."""
        host = self.supabase_url.split("://", 1)[-1]
        return host.split(".")[0] or None

    @property
    def auth_api_url(self) -> str:
        return f"{self.supabase_url.rstrip('/')}/auth/v1"

    @property
    def is_configured(self) -> bool:
        """Tokens can be verified locally."""
        return bool(self.supabase_url and self.supabase_jwt_secret)


@lru_cache()
def get_auth_config() -> AuthConfig:
    """Process-wide auth configuration."""
    return AuthConfig(
        supabase_url=os.getenv("SUPABASE_URL", ""),
        supabase_anon_key=os.getenv("SUPABASE_ANON_KEY", ""),
        supabase_jwt_secret=os.getenv("SUPABASE_JWT_SECRET", ""),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        auth_enabled=os.getenv("AUTH_ENABLED", "true").lower() == "true",
        dev_user_id=os.getenv("DEV_USER_ID", DEFAULT_DEV_USER_ID),
        dev_user_email=os.getenv("DEV_USER_EMAIL", "dev@nichelab.local"),
    )
