"""
External API Configuration

Factory for the OpenRouter completion client.

Environment variables:
- OPENROUTER_API_KEY: OpenRouter API key (checked when a completion runs)
- OPENROUTER_MODEL: Default model (default: openai/gpt-3.5-turbo)
- APP_URL / APP_TITLE: Attribution headers
"""

import logging
from typing import Optional

from nichelab.utils.config import Settings, get_settings
from .openrouter import OpenRouterClient

logger = logging.getLogger(__name__)


def create_completion_client(
    settings: Optional[Settings] = None,
    api_key: Optional[str] = None,
) -> OpenRouterClient:
    """
    Create an OpenRouter client from settings.

    A missing key is not an error here: the client reports a
    ConfigurationError on the first completion instead.
    """
    settings = settings or get_settings()
    key = api_key or settings.OPENROUTER_API_KEY
    if not key:
        logger.warning("OpenRouter API key not configured - AI features will fail")

    return OpenRouterClient(
        api_key=key,
        base_url=settings.OPENROUTER_BASE_URL,
        referer=settings.APP_URL,
        title=settings.APP_TITLE,
        timeout=float(settings.API_TIMEOUT),
        default_model=settings.OPENROUTER_MODEL,
    )
