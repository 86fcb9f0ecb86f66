"""LLM client for OpenAI-compatible providers.

Used by the revision hub to draft timetables. Any endpoint speaking the
OpenAI chat-completions protocol works (OpenAI, LM Studio).
"""

from __future__ import annotations

import json
import re
import time
from dataclasses import dataclass, field
from typing import Any, Literal

import structlog
from openai import OpenAI

from preptrack.config.app_config import load_app_config

logger = structlog.get_logger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

# Providers that accept response_format={"type": "json_object"}
JSON_OBJECT_PROVIDERS = {"openai"}

# Local servers ignore the key but the client requires one
PLACEHOLDER_API_KEY = "not-needed"

JSON_REPAIR_PROMPT = """The previous reply was not valid JSON. Return ONLY the corrected JSON object for this text:
<<<
{invalid_output}
>>>

No explanations, no markdown fences."""

# Reasoning blocks some local models emit before the answer
SANITIZE_PATTERNS = [
    re.compile(r"<think>.*?</think>", re.DOTALL | re.IGNORECASE),
    re.compile(r"<thinking>.*?</thinking>", re.DOTALL | re.IGNORECASE),
    re.compile(r"<reasoning>.*?</reasoning>", re.DOTALL | re.IGNORECASE),
]


def _sanitize_for_json(text: str) -> str:
    """Drop reasoning blocks before JSON extraction."""
    for pattern in SANITIZE_PATTERNS:
        text = pattern.sub("", text)
    return text.strip()


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class LLMConfig:
    """Connection and sampling settings for one provider."""

    provider: str = "openai"
    base_url: str | None = None
    model: str = "gpt-4o-mini"
    temperature: float = 0.7
    max_tokens: int = 2048
    timeout: int = 60
    api_key: str | None = None

    @classmethod
    def from_app_config(cls, provider: str | None = None) -> LLMConfig:
        """Build from data/config/app_config_v1.yaml.

        Args:
            provider: Provider name; defaults to tracker.default_provider

        Raises:
            LLMError: Provider not configured
        """
        app_config = load_app_config()
        name = provider or app_config.tracker.default_provider
        provider_config = app_config.providers.get(name)
        if provider_config is None:
            raise LLMError(f"LLM provider '{name}' is not configured")

        return cls(
            provider=name,
            base_url=provider_config.base_url,
            model=provider_config.default_model,
            api_key=provider_config.get_api_key(),
        )

    @property
    def supports_json_object(self) -> bool:
        """Whether the provider accepts the json_object response format."""
        return self.provider in JSON_OBJECT_PROVIDERS


@dataclass
class Message:
    """A chat message."""

    role: Literal["system", "user", "assistant"]
    content: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for API call."""
        return {"role": self.role, "content": self.content}


@dataclass
class LLMResponse:
    """Completion text plus usage metadata."""

    content: str
    model: str
    provider: str
    usage: dict[str, int] = field(default_factory=dict)
    latency_ms: int = 0

    @property
    def total_tokens(self) -> int:
        """Get total token count."""
        return self.usage.get("total_tokens", 0)


class LLMError(Exception):
    """Error during LLM interaction."""


class LLMConnectionError(LLMError):
    """Provider could not be reached."""


class LLMResponseError(LLMError):
    """Provider answered with something unusable."""


# =============================================================================
# LLM CLIENT
# =============================================================================


class LLMClient:
    """Thin wrapper over the OpenAI SDK with tolerant JSON handling."""

    def __init__(self, config: LLMConfig | None = None, provider: str | None = None):
        """Initialize LLM client.

        Args:
            config: Explicit configuration (built from app config if omitted)
            provider: Provider name used when building from app config
        """
        self.config = config or LLMConfig.from_app_config(provider)
        self._client = OpenAI(
            base_url=self.config.base_url,
            api_key=self.config.api_key or PLACEHOLDER_API_KEY,
            timeout=self.config.timeout,
        )
        logger.info(
            "llm_client_initialized",
            provider=self.config.provider,
            model=self.config.model,
        )

    def chat(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Send a chat completion request.

        Raises:
            LLMConnectionError: Provider unreachable
            LLMError: Any other SDK failure
            LLMResponseError: Response without choices
        """
        request_kwargs: dict[str, Any] = {
            "model": self.config.model,
            "messages": [m.to_dict() for m in messages],
            "temperature": self.config.temperature if temperature is None else temperature,
            "max_tokens": max_tokens or self.config.max_tokens,
        }
        if json_mode and self.config.supports_json_object:
            request_kwargs["response_format"] = {"type": "json_object"}

        start_time = time.time()
        try:
            response = self._client.chat.completions.create(**request_kwargs)
        except Exception as e:
            if "connect" in str(e).lower():
                raise LLMConnectionError(
                    f"Could not reach {self.config.provider} at {self.config.base_url or 'default endpoint'}: {e}"
                ) from e
            raise LLMError(f"LLM call failed: {e}") from e
        latency_ms = int((time.time() - start_time) * 1000)

        if not response.choices:
            raise LLMResponseError("Empty response from LLM")

        usage = {}
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        logger.debug(
            "llm_response",
            provider=self.config.provider,
            model=response.model,
            tokens=usage.get("total_tokens", 0),
            latency_ms=latency_ms,
        )
        return LLMResponse(
            content=response.choices[0].message.content or "",
            model=response.model,
            provider=self.config.provider,
            usage=usage,
            latency_ms=latency_ms,
        )

    @staticmethod
    def _try_parse_json(content: str) -> dict[str, Any] | None:
        """Extract a JSON object: whole text, fenced block, then outermost braces."""
        content = _sanitize_for_json(content)

        candidates = [content]
        fenced = re.search(r"```(?:json)?\s*([\s\S]*?)```", content)
        if fenced:
            candidates.append(fenced.group(1).strip())
        start, end = content.find("{"), content.rfind("}") + 1
        if start >= 0 and end > start:
            candidates.append(content[start:end])

        for candidate in candidates:
            try:
                parsed = json.loads(candidate)
            except json.JSONDecodeError:
                continue
            if isinstance(parsed, dict):
                return parsed
        return None

    def chat_json(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
        max_retries: int = 1,
    ) -> dict[str, Any]:
        """Chat expecting a JSON object, with repair retries.

        Raises:
            LLMResponseError: No valid JSON after retries
        """
        response = self.chat(messages, temperature, max_tokens, json_mode=True)
        parsed = self._try_parse_json(response.content)

        attempts = 0
        while parsed is None and attempts < max_retries:
            attempts += 1
            logger.warning(
                "json_parse_failed_retrying",
                content=response.content[:100],
                attempt=attempts,
            )
            repair = Message(
                role="user",
                content=JSON_REPAIR_PROMPT.format(invalid_output=response.content[:1000]),
            )
            response = self.chat(messages + [repair], temperature, max_tokens, json_mode=True)
            parsed = self._try_parse_json(response.content)

        if parsed is None:
            raise LLMResponseError(f"No valid JSON in LLM response: {response.content[:200]}...")
        return parsed

    def simple_json(
        self,
        system_prompt: str,
        user_message: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> dict[str, Any]:
        """Single-turn JSON request with a system prompt."""
        messages = [
            Message(role="system", content=system_prompt),
            Message(role="user", content=user_message),
        ]
        return self.chat_json(messages, temperature=temperature, max_tokens=max_tokens)

    def is_available(self) -> bool:
        """Check whether the provider answers a models listing."""
        try:
            self._client.models.list()
        except Exception as e:
            logger.debug("llm_unavailable", provider=self.config.provider, error=str(e))
            return False
        return True
