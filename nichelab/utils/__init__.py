"""Utility modules for NicheLab."""

from .config import Settings, get_settings, validate_backend_settings

__all__ = [
    "Settings",
    "get_settings",
    "validate_backend_settings",
]
