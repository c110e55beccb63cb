"""
OpenRouter Chat Completion Client

Structured completions for research and content generation.

OpenRouter exposes an OpenAI-compatible /chat/completions endpoint:
- Bearer token authorization
- {model, messages, temperature, max_tokens, stream} request body
- choices[0].message.content holds the model reply

The client asks the model for JSON matching a shape description, parses the
reply and optionally validates it against a pydantic schema. Every call is a
single request: there is no retry, the caller decides what to do with a
failure.

API: https://openrouter.ai/docs
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Type

import httpx
from pydantic import BaseModel, ValidationError

from nichelab.errors import ConfigurationError, NicheLabError, ParseError, TransportError
from nichelab.results import ServiceResult

logger = logging.getLogger(__name__)


# Model presets by use case
MODELS = {
    "FAST": "openai/gpt-3.5-turbo",
    "BALANCED": "openai/gpt-4-turbo-preview",
    "CREATIVE": "anthropic/claude-3-haiku",
    "RESEARCH": "openai/gpt-4",
    "CODING": "openai/gpt-4",
}

_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


@dataclass
class CompletionOptions:
    """Per-call generation options."""

    model: str = MODELS["FAST"]
    temperature: float = 0.7
    max_tokens: int = 1000

    def __post_init__(self):
        if not 0.0 <= self.temperature <= 1.0:
            raise ValueError(f"temperature must be between 0.0 and 1.0, got {self.temperature}")
        if self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive, got {self.max_tokens}")


def build_structured_prompt(prompt: str, shape: Dict[str, Any]) -> str:
    """Append JSON shape instructions to a prompt."""
    return (
        f"{prompt}\n\n"
        "Please respond with a valid JSON object that matches this schema:\n"
        f"{json.dumps(shape, indent=2)}\n\n"
        "Ensure your response is valid JSON and follows the schema exactly."
    )


def parse_json_reply(text: str) -> Any:
    """
    Parse model output as JSON.

    Accepts a bare JSON document or one wrapped in a ```json fence.
    The raw text is logged on failure and never returned.

    Raises:
        ParseError: text is not valid JSON
    """
    candidate = (text or "").strip()
    fenced = _FENCE_PATTERN.match(candidate)
    if fenced:
        candidate = fenced.group(1)

    try:
        return json.loads(candidate)
    except (json.JSONDecodeError, TypeError) as e:
        logger.error(f"Failed to parse JSON response: {text!r}")
        raise ParseError("Invalid JSON response from AI", details={"reason": str(e)})


def validate_reply(data: Any, schema: Type[BaseModel]) -> Dict[str, Any]:
    """
    Validate parsed JSON against a response schema.

    Returns the validated object dumped with its wire (camelCase) field names.

    Raises:
        ParseError: required fields are missing or mis-typed
    """
    try:
        model = schema.model_validate(data)
    except ValidationError as e:
        errors = [
            {"loc": ".".join(str(part) for part in err["loc"]), "msg": err["msg"]}
            for err in e.errors(include_url=False, include_input=False)
        ]
        logger.error(f"AI response failed {schema.__name__} validation: {errors}")
        raise ParseError(
            "AI response did not match the expected format",
            details={"schema": schema.__name__, "errors": errors},
        )
    return model.model_dump(by_alias=True)


class OpenRouterClient:
    """
    Async client for the OpenRouter chat completion API.

    Usage:
        client = OpenRouterClient(api_key="sk-or-...")

        result = await client.complete(prompt, shape, CompletionOptions(temperature=0.3))
        if result.success:
            data = result.data

        await client.close()
    """

    BASE_URL = "https://openrouter.ai/api/v1"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        referer: str = "http://localhost:8000",
        title: str = "Niche Site Builder",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        default_model: str = MODELS["FAST"],
    ):
        """
        Initialize OpenRouter client.

        Args:
            api_key: OpenRouter API key; checked when a completion is attempted
            base_url: API base URL (defaults to OpenRouter)
            referer: HTTP-Referer attribution header
            title: X-Title attribution header
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests)
            default_model: Model used when a call passes no options
        """
        self.api_key = api_key
        self.base_url = base_url or self.BASE_URL
        self.default_model = default_model

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Content-Type": "application/json",
                "HTTP-Referer": referer,
                "X-Title": title,
            },
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )
        self._closed = False

    async def create_chat_completion(
        self,
        messages: list,
        options: Optional[CompletionOptions] = None,
    ) -> Dict[str, Any]:
        """
        Send one chat completion request.

        Raises:
            ConfigurationError: API key missing (no request is made)
            TransportError: non-2xx response or network failure
        """
        if not self.api_key:
            raise ConfigurationError("OpenRouter API key is required")
        if self._closed:
            raise TransportError("Client has been closed")

        options = options or CompletionOptions(model=self.default_model)
        payload = {
            "model": options.model,
            "messages": messages,
            "temperature": options.temperature,
            "max_tokens": options.max_tokens,
            "stream": False,
        }

        try:
            response = await self._client.post(
                "/chat/completions",
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
        except httpx.HTTPError as e:
            raise TransportError(f"OpenRouter request failed: {e}")

        if not response.is_success:
            try:
                error_data = response.json()
            except ValueError:
                error_data = {}
            remote_message = None
            if isinstance(error_data, dict) and isinstance(error_data.get("error"), dict):
                remote_message = error_data["error"].get("message")
            raise TransportError(
                f"OpenRouter API error: {response.status_code} - {remote_message or 'Unknown error'}",
                status_code=response.status_code,
                details={"remote_message": remote_message},
            )

        try:
            return response.json()
        except ValueError:
            raise ParseError("OpenRouter returned a non-JSON response body")

    async def _generate(self, prompt: str, options: Optional[CompletionOptions]) -> str:
        messages = [{"role": "user", "content": prompt}]
        response = await self.create_chat_completion(messages, options)

        choices = response.get("choices") or []
        if not choices:
            return ""
        message = choices[0].get("message") or {}
        return message.get("content") or ""

    async def generate_text(
        self,
        prompt: str,
        options: Optional[CompletionOptions] = None,
    ) -> ServiceResult:
        """Generate free text for a prompt."""
        try:
            text = await self._generate(prompt, options)
        except NicheLabError as e:
            return ServiceResult.fail(e)
        return ServiceResult.ok(text)

    async def complete(
        self,
        prompt: str,
        shape: Dict[str, Any],
        options: Optional[CompletionOptions] = None,
        schema: Optional[Type[BaseModel]] = None,
    ) -> ServiceResult:
        """
        Request a JSON object matching ``shape``.

        Args:
            prompt: Free-text prompt
            shape: Shape description sent to the model (instructions only)
            options: Model, temperature and token limit
            schema: Optional pydantic schema validated after parsing

        Returns:
            ServiceResult with the parsed object, or a failed envelope of kind
            configuration / transport / parse
        """
        enhanced_prompt = build_structured_prompt(prompt, shape)
        try:
            text = await self._generate(enhanced_prompt, options)
            data = parse_json_reply(text)
            if schema is not None:
                data = validate_reply(data, schema)
        except NicheLabError as e:
            logger.warning(f"Structured completion failed ({e.kind}): {e.message}")
            return ServiceResult.fail(e)

        return ServiceResult.ok(data)

    async def close(self):
        """Close the HTTP client."""
        if not self._closed:
            await self._client.aclose()
            self._closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
