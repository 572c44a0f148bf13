import logging
from typing import Literal
from typing import Protocol
from typing import runtime_checkable
from uuid import uuid4

import httpx
from openai import AsyncOpenAI
from openai import OpenAIError
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import SecretStr
from tenacity import RetryCallState
from tenacity import retry
from tenacity import stop_after_attempt
from tenacity import wait_exponential

from reportkit.core.config import settings
from reportkit.core.exceptions import ConfigurationError

# Configure module logger
logger = logging.getLogger(__name__)

ProviderName = Literal["openai", "openrouter", "gemini", "deepseek"]

# OpenAI-compatible endpoints per provider (None = library default)
PROVIDER_BASE_URLS: dict[str, str | None] = {
    "openai": None,
    "openrouter": "https://openrouter.ai/api/v1",
    "gemini": "https://generativelanguage.googleapis.com/v1beta/openai/",
    "deepseek": "https://api.deepseek.com",
}

PROVIDER_MODELS: dict[str, list[str]] = {
    "openai": ["gpt-4o", "gpt-4o-mini", "gpt-4-turbo", "gpt-4", "gpt-3.5-turbo"],
    "openrouter": ["openai/gpt-4o-mini", "meta-llama/llama-4-maverick", "anthropic/claude-3.5-sonnet"],
    "gemini": ["gemini-1.5-pro", "gemini-1.5-flash", "gemini-2.0-flash"],
    "deepseek": ["deepseek-chat", "deepseek-coder"],
}

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class LLMError(Exception):
    """Raised when a generation call fails"""

    def __init__(self, message: str, provider: str | None = None):
        super().__init__(message)
        self.provider = provider


class LLMConfig(BaseModel):
    """Generation client configuration supplied with each report request."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    provider: ProviderName = Field(default_factory=lambda: settings.llm_provider)
    model: str = Field(default_factory=lambda: settings.model_id)
    api_key: SecretStr | None = Field(default=None, repr=False)
    base_url: str | None = None

    def resolved_api_key(self) -> str | None:
        if self.api_key is not None:
            return self.api_key.get_secret_value()
        return settings.api_key_for(self.provider)


@runtime_checkable
class GenerationClient(Protocol):
    """Contract consumed by the report engine."""

    provider: str
    model: str

    async def generate_text(self, prompt: str, model: str | None = None) -> str: ...


def get_supported_providers() -> list[str]:
    return list(PROVIDER_BASE_URLS)


def is_provider_supported(provider: str) -> bool:
    return provider in PROVIDER_BASE_URLS


def get_available_models(provider: str) -> list[str]:
    if not is_provider_supported(provider):
        raise LLMError(f"Unsupported provider: {provider}", provider)
    return list(PROVIDER_MODELS[provider])


# ---------------------------------------------------------------
# Helper predicate for tenacity retry
# ---------------------------------------------------------------


def _should_retry_llm_call(retry_state: RetryCallState) -> bool:
    """Determines if a retry should occur based on the exception in RetryCallState."""
    if not retry_state.outcome:
        return False

    exc = retry_state.outcome.exception()
    if not exc:
        return False

    # Unwrap LLMError to get to the original cause (e.g., OpenAIError)
    actual_exception = exc.__cause__ if isinstance(exc, LLMError) and exc.__cause__ else exc

    status = getattr(actual_exception, "status", None) or getattr(actual_exception, "status_code", None)
    if status in RETRYABLE_STATUS_CODES:
        logger.debug("Retryable API error status %s detected. Retrying...", status)
        return True
    return False


class OpenAICompatibleClient:
    """Generation client for any provider exposing an OpenAI-compatible chat API."""

    def __init__(self, config: LLMConfig, client: AsyncOpenAI | None = None):
        self.provider = config.provider
        self.model = config.model
        if client is None:
            api_key = config.resolved_api_key()
            if not api_key:
                raise ConfigurationError(f"No API key configured for provider '{config.provider}'")
            client = AsyncOpenAI(
                base_url=config.base_url or PROVIDER_BASE_URLS[config.provider],
                api_key=api_key,
                timeout=httpx.Timeout(settings.LLM_CONNECT_TIMEOUT, read=settings.LLM_READ_TIMEOUT),
                max_retries=settings.llm_max_retries,
            )
        self._client = client

    @retry(
        wait=wait_exponential(multiplier=1, min=2, max=10),
        stop=stop_after_attempt(3),
        retry=_should_retry_llm_call,
        reraise=True,
    )  # type: ignore
    async def generate_text(self, prompt: str, model: str | None = None) -> str:
        request_id = str(uuid4())
        model_id = model or self.model
        logger.info("[%s] Making %s API call with model: %s", request_id, self.provider, model_id)

        try:
            rsp = await self._client.chat.completions.create(
                model=model_id,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=settings.llm_max_tokens,
                temperature=settings.llm_temperature,
            )
        except OpenAIError as e:
            # Wrapped here; the retry predicate unwraps __cause__ to decide whether to retry.
            logger.error("[%s] %s API error: %s", request_id, self.provider, str(e))
            raise LLMError(f"{self.provider} API error: {str(e)}", self.provider) from e

        if not rsp or not getattr(rsp, "choices", None):
            logger.error("[%s] Invalid response structure from LLM API: %s", request_id, str(rsp))
            raise LLMError(f"Invalid response structure from LLM API: {str(rsp)}", self.provider)

        message = getattr(rsp.choices[0], "message", None)
        content = getattr(message, "content", None)
        if content is None:
            logger.error("[%s] No content in LLM message: %s", request_id, str(message))
            raise LLMError("LLM response contained no content", self.provider)

        logger.debug("[%s] LLM response received, length: %d chars", request_id, len(content))
        return content


def create_llm_client(config: LLMConfig) -> GenerationClient:
    """Create a generation client for *config*."""
    if not is_provider_supported(config.provider):
        raise LLMError(f"Unsupported provider: {config.provider}", config.provider)
    return OpenAICompatibleClient(config)
