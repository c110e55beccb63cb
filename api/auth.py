"""
Auth API

Thin wrappers over Supabase auth for clients that do not talk to Supabase
directly. The returned access token is what every other router expects as
its bearer token.

Endpoints:
- POST /api/auth/register - Sign up and create the profile row
- POST /api/auth/login - Password sign-in
- POST /api/auth/logout - Revoke the bearer token
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import BaseModel, Field

from nichelab.auth.dependencies import security
from nichelab.auth.identity import RequestIdentity
from nichelab.errors import ConfigurationError, NotAuthenticatedError
from nichelab.results import ServiceResult
from nichelab.services import UserService
from .common import create_auth_client, envelope_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


class RegisterRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=6)
    name: Optional[str] = Field(None, max_length=255)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)


@router.post("/register")
async def register(request: RegisterRequest):
    """Register with Supabase; the session is null when email confirmation is required."""
    try:
        auth = create_auth_client()
    except ConfigurationError as e:
        return envelope_response(ServiceResult.fail(e))

    async with auth:
        result = await UserService(RequestIdentity(None)).register(
            auth, request.email, request.password, request.name,
        )
    return envelope_response(result, success_status=201)


@router.post("/login")
async def login(request: LoginRequest):
    try:
        auth = create_auth_client()
    except ConfigurationError as e:
        return envelope_response(ServiceResult.fail(e))

    async with auth:
        result = await auth.sign_in(request.email, request.password)
    return envelope_response(result)


@router.post("/logout")
async def logout(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)):
    if not credentials:
        return envelope_response(ServiceResult.fail(NotAuthenticatedError("User not authenticated")))

    try:
        auth = create_auth_client()
    except ConfigurationError as e:
        return envelope_response(ServiceResult.fail(e))

    async with auth:
        result = await auth.revoke(credentials.credentials)
    return envelope_response(result)
