"""
Error Taxonomy

Every failure that crosses a service boundary is described by one of these
classes. Services do not raise them to their callers; they convert them into
failed ServiceResult envelopes (see nichelab.results).
"""

from typing import Any, Dict, Optional


class NicheLabError(Exception):
    """Base class for expected, recoverable failures."""

    kind = "error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_details(self) -> Dict[str, Any]:
        return {"kind": self.kind, **self.details}


class ConfigurationError(NicheLabError):
    """Required credentials or endpoints are missing."""

    kind = "configuration"


class TransportError(NicheLabError):
    """The completion endpoint answered with a non-2xx status or was unreachable."""

    kind = "transport"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code

    def to_details(self) -> Dict[str, Any]:
        return {"kind": self.kind, "status_code": self.status_code, **self.details}


class ParseError(NicheLabError):
    """The completion reply was not valid JSON or did not match the expected schema."""

    kind = "parse"


class PersistenceError(NicheLabError):
    """A storage operation failed."""

    kind = "persistence"


class NotFoundError(PersistenceError):
    """A storage operation required a row and none matched."""

    kind = "not_found"


class NotAuthenticatedError(NicheLabError):
    """The operation needs a signed-in identity and none is present."""

    kind = "not_authenticated"

    def __init__(self, message: str = "User not authenticated", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class InvalidInputError(NicheLabError):
    """Caller-supplied arguments were rejected before any external call."""

    kind = "invalid_input"
