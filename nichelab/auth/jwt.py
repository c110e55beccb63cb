"""
JWT Token Validation for Supabase Auth

Access tokens issued by Supabase are verified with the project's JWT secret
(HS256) or, for asymmetric algorithms, with the public key from the project's
JWKS endpoint.
"""

import logging
from functools import lru_cache
from typing import Any, Dict

import jwt
from jwt import PyJWKClient, PyJWTError

from nichelab.auth.config import AuthConfig, get_auth_config
from nichelab.auth.identity import AuthUser

logger = logging.getLogger(__name__)

ASYMMETRIC_ALGORITHMS = {"RS256", "RS384", "RS512", "ES256", "ES384", "ES512", "PS256", "PS384", "PS512"}


class JWTError(Exception):
    """Token could not be verified."""
    pass


@lru_cache(maxsize=1)
def get_jwks_client(jwks_url: str) -> PyJWKClient:
    """Cached JWKS client for fetching public keys."""
    return PyJWKClient(jwks_url, cache_keys=True, lifespan=3600)


def get_verification_key(token: str, config: AuthConfig) -> Any:
    """Secret for symmetric algorithms, JWKS public key for asymmetric ones."""
    if config.jwt_algorithm not in ASYMMETRIC_ALGORITHMS:
        if not config.supabase_jwt_secret:
            raise JWTError("SUPABASE_JWT_SECRET not configured")
        return config.supabase_jwt_secret

    if not config.supabase_url:
        raise JWTError(f"SUPABASE_URL required for {config.jwt_algorithm} tokens")

    jwks_url = f"{config.auth_api_url}/.well-known/jwks.json"
    try:
        return get_jwks_client(jwks_url).get_signing_key_from_jwt(token).key
    except PyJWTError as e:
        logger.error(f"Failed to fetch JWKS from {jwks_url}: {e}")
        raise JWTError(f"Failed to fetch public key from Supabase: {e}")


def verify_supabase_token(token: str, config: AuthConfig = None) -> Dict[str, Any]:
    """
    Verify and decode a Supabase access token.

    Args:
        token: Bearer token from the Authorization header
        config: Auth configuration (defaults to the cached one)

    Returns:
        Decoded payload

    Raises:
        JWTError: token invalid, expired, wrongly signed or missing "sub"
    """
    config = config or get_auth_config()

    try:
        payload = jwt.decode(
            token,
            get_verification_key(token, config),
            algorithms=[config.jwt_algorithm],
            audience=config.jwt_audience,
        )
    except jwt.ExpiredSignatureError:
        raise JWTError("Token has expired")
    except jwt.InvalidAudienceError:
        raise JWTError("Invalid token audience")
    except jwt.InvalidSignatureError:
        raise JWTError("Invalid token signature")
    except jwt.InvalidAlgorithmError:
        raise JWTError(f"Token algorithm does not match {config.jwt_algorithm}")
    except jwt.DecodeError as e:
        raise JWTError(f"Token decode error: {e}")
    except PyJWTError as e:
        raise JWTError(f"Token validation error: {e}")

    if not payload.get("sub"):
        raise JWTError("Token missing 'sub' claim (user ID)")

    return payload


def user_from_payload(payload: Dict[str, Any]) -> AuthUser:
    """
    Build the acting identity from a verified payload.

    Supabase payload structure:
    {
        "sub": "user-uuid",
        "email": "user@example.com",
        "aud": "authenticated",
        "user_metadata": {"name": "Jane Doe"},
        "exp": 1234567890
    }
    """
    metadata = payload.get("user_metadata") or {}
    return AuthUser(
        id=payload["sub"],
        email=payload.get("email"),
        name=metadata.get("name") or metadata.get("full_name"),
        metadata=metadata,
    )
