"""
Service Result Envelope

Uniform return shape for every service-boundary function:

    {"success": True, "data": ..., "error": None}
    {"success": False, "error": "message", "details": {...}}

Callers branch on ``success`` only.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from nichelab.errors import NicheLabError

logger = logging.getLogger(__name__)


@dataclass
class ServiceResult:
    """Outcome of a service call."""
    success: bool
    data: Any = None
    error: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, data: Any = None) -> "ServiceResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: Exception) -> "ServiceResult":
        """Build a failed envelope from an exception."""
        if isinstance(error, NicheLabError):
            return cls(success=False, error=error.message, details=error.to_details())

        logger.error(f"Unexpected service error: {error!r}")
        return cls(
            success=False,
            error=str(error) or "An unexpected error occurred",
            details={"kind": "error", "type": type(error).__name__},
        )

    @property
    def kind(self) -> Optional[str]:
        """Error kind of a failed envelope, None on success."""
        if self.success:
            return None
        return self.details.get("kind", "error")

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.data, "error": None}
        return {"success": False, "error": self.error, "details": self.details}
