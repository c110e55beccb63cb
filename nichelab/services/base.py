"""
Shared plumbing for entity services.

Service methods return ServiceResult envelopes. Expected failures
(NicheLabError) raised anywhere inside a method decorated with ``envelope``
are converted into failed envelopes; anything else propagates.
"""

import asyncio
import functools
import inspect
from typing import Any, Callable, Optional, Protocol
from uuid import UUID

from sqlalchemy.orm import sessionmaker

from nichelab.auth.identity import AuthUser
from nichelab.database.gateway import to_uuid
from nichelab.errors import NicheLabError, NotAuthenticatedError
from nichelab.results import ServiceResult


class IdentityProvider(Protocol):
    def get_current_user(self) -> Optional[AuthUser]:
        ...


def envelope(func: Callable) -> Callable:
    """Turn NicheLabError raised by ``func`` into ServiceResult.fail."""
    if inspect.iscoroutinefunction(func):
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except NicheLabError as e:
                return ServiceResult.fail(e)
        return async_wrapper

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except NicheLabError as e:
            return ServiceResult.fail(e)
    return wrapper


def unwrap(result: ServiceResult) -> Any:
    """Return the data of a successful envelope, re-raise the failure otherwise."""
    if result.success:
        return result.data
    raise _EnvelopeFailure(result)


class _EnvelopeFailure(NicheLabError):
    """Carries an already-built failed envelope through ``envelope``."""

    def __init__(self, result: ServiceResult):
        super().__init__(result.error, dict(result.details))
        self.kind = result.kind


async def gather_results(*calls: Callable[[], ServiceResult]) -> list:
    """
    Run independent blocking reads concurrently and return their data.

    All calls complete before anything is combined; the first failed envelope
    (in argument order) fails the whole combination.
    """
    results = await asyncio.gather(*(asyncio.to_thread(call) for call in calls))
    return [unwrap(result) for result in results]


class OwnedService:
    """Base for services whose rows are reachable only through the owner."""

    def __init__(self, identity: IdentityProvider, session_factory: Optional[sessionmaker] = None):
        self.identity = identity
        self.session_factory = session_factory

    def current_user(self) -> AuthUser:
        user = self.identity.get_current_user()
        if user is None:
            raise NotAuthenticatedError()
        return user

    def owner_id(self) -> UUID:
        return to_uuid(self.current_user().id)
