"""
External API Integrations

- OpenRouter: structured chat completions for research and content
- Config: client factory from settings
"""

from .openrouter import (
    MODELS,
    CompletionOptions,
    OpenRouterClient,
    build_structured_prompt,
    parse_json_reply,
    validate_reply,
)
from .config import create_completion_client

__all__ = [
    "MODELS",
    "CompletionOptions",
    "OpenRouterClient",
    "build_structured_prompt",
    "parse_json_reply",
    "validate_reply",
    "create_completion_client",
]
