"""Application configuration settings.

This module defines the application-wide settings using Pydantic's BaseSettings.
It allows for loading configurations from environment variables and .env files,
providing type validation and default values.
"""

from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings

# Default list of CORS allowed origins
DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:8000",
    "https://localhost:3000",
    "https://localhost:8000",
    "http://0.0.0.0:8000",  # Local development with 0.0.0.0 host
]


class Settings(BaseSettings):
    """Manages application settings, loading them from environment variables or an .env file.

    Attributes:
        llm_provider: Default generation provider used when a request does not name one.
        model_id: Default model identifier for the generation client.
        openai_api_key: API key for OpenAI.
        openrouter_api_key: API key for OpenRouter services.
        gemini_api_key: API key for Google Gemini (OpenAI-compatible endpoint).
        deepseek_api_key: API key for DeepSeek.
        llm_max_retries: Retries performed by the underlying OpenAI client.
        llm_temperature: Sampling temperature for generation calls.
        llm_max_tokens: Maximum completion tokens per generation call.
        default_sample_set: Name of the bundle sample set exposed to prompts as ``samples``.
        plugin_replace_on_duplicate: Whether registering an existing plugin id replaces it.
        plugin_entry_point_group: Entry point group scanned for installed plugins.
        api_key: General API key for securing internal API endpoints.
        cors_allowed_origins: List of allowed origins for CORS.
        LLM_CONNECT_TIMEOUT: LLM client connect timeout in seconds.
        LLM_READ_TIMEOUT: LLM client read timeout in seconds.
    """

    llm_provider: str = Field(default="openai")
    model_id: str = Field(default="gpt-4o-mini")

    openai_api_key: str | None = Field(default=None)
    openrouter_api_key: str | None = Field(default=None)
    gemini_api_key: str | None = Field(default=None)
    deepseek_api_key: str | None = Field(default=None)

    llm_max_retries: int = Field(default=2)
    llm_temperature: float = Field(default=0.2)
    llm_max_tokens: int = Field(default=3000)

    default_sample_set: str = Field(default="main")
    plugin_replace_on_duplicate: bool = Field(default=False)
    plugin_entry_point_group: str = Field(default="reportkit.plugins")

    api_key: str | None = Field(default=None)

    cors_allowed_origins: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CORS_ORIGINS),  # Use a copy of the default list
    )

    LLM_CONNECT_TIMEOUT: float = Field(default=10.0, description="LLM client connect timeout in seconds.")
    LLM_READ_TIMEOUT: float = Field(default=180.0, description="LLM client read timeout in seconds.")

    model_config = {
        "env_file": ".env",
        "protected_namespaces": ("settings_",),
        "env_prefix": "",  # No prefix for environment variables
        "extra": "ignore",  # Ignore extra fields
    }

    @field_validator("cors_allowed_origins", mode="before")  # type: ignore
    @classmethod
    def assemble_cors_origins(cls, v: str | list[str] | None) -> list[str]:
        """Assembles the list of CORS allowed origins.

        If 'v' is a string, it splits it by commas. If 'v' is already a list,
        it's used directly. Otherwise, returns the default list of origins.
        """
        if isinstance(v, str) and v:
            return [origin.strip() for origin in v.split(",")]
        elif isinstance(v, list):
            return v
        return list(DEFAULT_CORS_ORIGINS)

    def api_key_for(self, provider: str) -> str | None:
        """Return the configured API key for *provider*, if any."""
        return getattr(self, f"{provider}_api_key", None)


settings = Settings()
