"""
AI Provider Interface

Chat-completion providers that turn a compiled strategy prompt into an
Expert Advisor. All providers include exponential backoff with jitter for
transient failures.
"""

from abc import ABC, abstractmethod
from typing import Optional
import asyncio
import logging
import random

from openai import OpenAI
from anthropic import Anthropic

logger = logging.getLogger(__name__)

# ─── Retry Configuration ───────────────────────────────────────────

DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY = 1.0       # seconds
DEFAULT_MAX_DELAY = 30.0       # seconds
DEFAULT_BACKOFF_FACTOR = 2.0
DEFAULT_JITTER = 0.5           # ±50% jitter

DEFAULT_ANTHROPIC_MODEL = "claude-sonnet-4-5"
DEFAULT_OPENAI_MODEL = "gpt-5.2"

# Exceptions worth retrying (transient / rate-limit)
_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 529}


def _is_retryable(exc: Exception) -> bool:
    """Return True if the exception is a transient failure worth retrying."""
    # Anthropic and OpenAI API errors both expose status_code
    if getattr(exc, "status_code", None) in _RETRYABLE_STATUS_CODES:
        return True
    # Generic HTTP status via response attribute
    response = getattr(exc, "response", None)
    if response is not None and getattr(response, "status_code", None) in _RETRYABLE_STATUS_CODES:
        return True
    # Connection-level errors
    err_name = type(exc).__name__.lower()
    if any(kw in err_name for kw in ("timeout", "connection", "overloaded", "ratelimit")):
        return True
    return False


async def _retry_with_backoff(
    fn,
    *,
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay: float = DEFAULT_BASE_DELAY,
    max_delay: float = DEFAULT_MAX_DELAY,
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
    jitter: float = DEFAULT_JITTER,
):
    """
    Execute `fn` (an async callable returning a value) with exponential backoff.
    Retries only on transient / rate-limit errors.
    """
    for attempt in range(max_retries + 1):
        try:
            return await fn()
        except Exception as exc:
            if attempt >= max_retries or not _is_retryable(exc):
                raise
            delay = min(base_delay * (backoff_factor ** attempt), max_delay)
            delay *= 1.0 + random.uniform(-jitter, jitter)
            delay = max(0.1, delay)
            logger.warning(
                "API call failed (attempt %d/%d): %s, retrying in %.1fs",
                attempt + 1, max_retries + 1, exc, delay,
            )
            await asyncio.sleep(delay)


class AIProvider(ABC):
    """Abstract base class for AI providers"""

    @abstractmethod
    async def generate(
        self,
        system_prompt: str,
        user_prompt: str
    ) -> str:
        """Generate text completion"""
        pass


class OpenAIProvider(AIProvider):
    """OpenAI chat-completions provider"""

    def __init__(self, api_key: str, model: str = DEFAULT_OPENAI_MODEL):
        self.client = OpenAI(api_key=api_key)
        self.model = model

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str
    ) -> str:
        async def _call():
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
            )
            return response.choices[0].message.content

        return await _retry_with_backoff(_call)


class AnthropicProvider(AIProvider):
    """Anthropic Claude AI provider"""

    def __init__(self, api_key: str, model: str = DEFAULT_ANTHROPIC_MODEL, max_tokens: int = 8192):
        self.client = Anthropic(api_key=api_key)
        self.model = model
        self.max_tokens = max_tokens

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str
    ) -> str:
        """Generate text completion using Claude. Caches the system prompt."""
        system_blocks = [
            {"type": "text", "text": system_prompt, "cache_control": {"type": "ephemeral"}}
        ]

        async def _call():
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system_blocks,
                temperature=0.7,
                messages=[
                    {"role": "user", "content": user_prompt}
                ]
            )
            return "".join(
                block.text for block in response.content if getattr(block, "type", "text") == "text"
            )

        return await _retry_with_backoff(_call)


def get_provider(api_key: str, model: Optional[str] = None, provider: str = "anthropic") -> AIProvider:
    """Factory function to get AI provider

    Args:
        api_key: API key for the provider
        model: Model name (optional, uses default for provider)
        provider: Provider name ('openai' or 'anthropic')
    """

    if provider.lower() == "anthropic":
        return AnthropicProvider(
            api_key=api_key,
            model=model or DEFAULT_ANTHROPIC_MODEL
        )
    if provider.lower() == "openai":
        return OpenAIProvider(
            api_key=api_key,
            model=model or DEFAULT_OPENAI_MODEL
        )
    raise ValueError(f"Invalid provider: {provider}. Must be 'openai' or 'anthropic'")
