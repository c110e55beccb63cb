"""
Identity Service

Supabase auth (GoTrue REST API) over httpx:
- POST /auth/v1/signup
- POST /auth/v1/token?grant_type=password
- POST /auth/v1/logout
- GET  /auth/v1/user

Services never talk to this module directly. They receive an identity
provider, any object with ``get_current_user() -> Optional[AuthUser]``:
- SupabaseIdentityService: a signed-in client session (CLI, AppState)
- RequestIdentity: the verified bearer token of one API request
"""

import inspect
import json
import logging
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

import httpx

from nichelab.errors import ConfigurationError, NicheLabError, NotAuthenticatedError, TransportError
from nichelab.results import ServiceResult

logger = logging.getLogger(__name__)


SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

# GoTrue answers bad credentials / duplicate sign-ups with these
_CREDENTIAL_STATUSES = {400, 401, 403, 422}


@dataclass
class AuthUser:
    """The acting identity."""
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "AuthUser":
        metadata = data.get("user_metadata") or {}
        return cls(
            id=data["id"],
            email=data.get("email"),
            name=metadata.get("name") or metadata.get("full_name"),
            metadata=metadata,
        )


@dataclass
class AuthSession:
    access_token: str
    user: AuthUser
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "AuthSession":
        expires_at = data.get("expires_at")
        if expires_at is None and data.get("expires_in"):
            expires_at = int(time.time()) + int(data["expires_in"])
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            expires_at=expires_at,
            user=AuthUser.from_api(data["user"]),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuthSession":
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            expires_at=data.get("expires_at"),
            user=AuthUser(**data["user"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


AuthListener = Callable[[str, Optional[AuthSession]], Union[None, Awaitable[None]]]


class RequestIdentity:
    """Identity provider for a single verified request."""

    def __init__(self, user: Optional[AuthUser]):
        self.user = user

    def get_current_user(self) -> Optional[AuthUser]:
        return self.user


class FileSessionStore:
    """Persists the signed-in session as JSON so it survives restarts."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> Optional[AuthSession]:
        if not self.path.exists():
            return None
        try:
            return AuthSession.from_dict(json.loads(self.path.read_text()))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return None

    def save(self, session: AuthSession) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(session.to_dict()))

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()


class SupabaseIdentityService:
    """
    Client-side Supabase session.

    Usage:
        identity = SupabaseIdentityService(url, anon_key)
        identity.on_auth_state_change(lambda event, session: print(event))

        result = await identity.sign_in("me@example.com", "secret")
        user = identity.get_current_user()
    """

    def __init__(
        self,
        url: str,
        anon_key: str,
        store: Optional[FileSessionStore] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not url or not anon_key:
            raise ConfigurationError(
                "Missing Supabase environment variables. Please check your .env file.",
                details={"missing": [n for n, v in (("SUPABASE_URL", url), ("SUPABASE_ANON_KEY", anon_key)) if not v]},
            )
        self.anon_key = anon_key
        self.store = store
        self.session: Optional[AuthSession] = None
        self._listeners: List[AuthListener] = []

        self._client = httpx.AsyncClient(
            base_url=f"{url.rstrip('/')}/auth/v1",
            headers={"apikey": anon_key, "Content-Type": "application/json"},
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    # =========================================================================
    # SESSION STATE
    # =========================================================================

    def get_current_user(self) -> Optional[AuthUser]:
        return self.session.user if self.session else None

    def on_auth_state_change(self, listener: AuthListener) -> Callable[[], None]:
        """Register a listener for SIGNED_IN / SIGNED_OUT; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _emit(self, event: str) -> None:
        for listener in list(self._listeners):
            outcome = listener(event, self.session)
            if inspect.isawaitable(outcome):
                await outcome

    async def _set_session(self, session: Optional[AuthSession]) -> None:
        self.session = session
        if self.store is not None:
            if session is None:
                self.store.clear()
            else:
                self.store.save(session)
        await self._emit(SIGNED_IN if session else SIGNED_OUT)

    # =========================================================================
    # HTTP
    # =========================================================================

    async def _request(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        headers = {"Authorization": f"Bearer {token or self.anon_key}"}
        try:
            response = await self._client.request(method, path, json=payload, params=params, headers=headers)
        except httpx.HTTPError as e:
            raise TransportError(f"Supabase auth request failed: {e}")

        try:
            data = response.json() if response.content else {}
        except ValueError:
            data = {}

        if response.is_success:
            return data

        message = None
        if isinstance(data, dict):
            message = data.get("error_description") or data.get("msg") or data.get("message")
        message = message or f"Supabase auth error: {response.status_code}"

        if response.status_code in _CREDENTIAL_STATUSES:
            raise NotAuthenticatedError(message, details={"status_code": response.status_code})
        raise TransportError(message, status_code=response.status_code)

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    async def sign_up(self, email: str, password: str, name: Optional[str] = None) -> ServiceResult:
        """
        Register a new identity.

        Returns {"user": AuthUser, "session": AuthSession | None}; the session is
        None when the project requires email confirmation.
        """
        body = {"email": email, "password": password, "data": {"name": name} if name else {}}
        try:
            data = await self._request("POST", "/signup", body)
        except NicheLabError as e:
            return ServiceResult.fail(e)

        if data.get("access_token"):
            session = AuthSession.from_api(data)
            await self._set_session(session)
            return ServiceResult.ok({"user": session.user, "session": session})

        user_data = data.get("user") or data
        return ServiceResult.ok({"user": AuthUser.from_api(user_data), "session": None})

    async def sign_in(self, email: str, password: str) -> ServiceResult:
        """Password sign-in. Emits SIGNED_IN on success."""
        try:
            data = await self._request(
                "POST", "/token", {"email": email, "password": password},
                params={"grant_type": "password"},
            )
        except NicheLabError as e:
            return ServiceResult.fail(e)

        session = AuthSession.from_api(data)
        await self._set_session(session)
        logger.info(f"Signed in as {session.user.email}")
        return ServiceResult.ok(session)

    async def sign_out(self) -> ServiceResult:
        """Revoke the session remotely and clear it locally. Emits SIGNED_OUT."""
        session = self.session
        if session is None:
            return ServiceResult.ok(None)

        try:
            await self._request("POST", "/logout", token=session.access_token)
        except NicheLabError as e:
            # The local session is cleared regardless
            logger.warning(f"Remote sign-out failed: {e.message}")
            await self._set_session(None)
            return ServiceResult.fail(e)

        await self._set_session(None)
        return ServiceResult.ok(None)

    async def revoke(self, access_token: str) -> ServiceResult:
        """Revoke an access token that is not this client's own session (API logout)."""
        try:
            await self._request("POST", "/logout", token=access_token)
        except NicheLabError as e:
            return ServiceResult.fail(e)
        return ServiceResult.ok(None)

    async def fetch_user(self, access_token: str) -> ServiceResult:
        """Resolve the identity behind an access token."""
        try:
            data = await self._request("GET", "/user", token=access_token)
        except NicheLabError as e:
            return ServiceResult.fail(e)
        return ServiceResult.ok(AuthUser.from_api(data))

    async def restore_session(self) -> Optional[AuthSession]:
        """
        Hydrate from the session store, keeping the session only if the token
        is still accepted. A rejected token clears the store; an unreachable
        auth server leaves it for the next attempt. Emits SIGNED_IN when a
        session is restored.
        """
        if self.store is None:
            return self.session

        stored = self.store.load()
        if stored is None:
            return None

        result = await self.fetch_user(stored.access_token)
        if result.kind == "not_authenticated":
            logger.info(f"Stored session rejected ({result.error}); clearing it")
            self.store.clear()
            return None
        if not result.success:
            # Supabase unreachable; keep the stored session for the next start
            logger.warning(f"Could not verify stored session: {result.error}")
            return None

        stored.user = result.data
        await self._set_session(stored)
        return stored

    async def close(self):
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
