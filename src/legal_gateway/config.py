from __future__ import annotations

import os
import re

from pydantic import BaseModel, Field

# `.env.example` ships values like `your_groq_api_key`; those mean "not set".
_PLACEHOLDER_RE = re.compile(r"^your_[a-z0-9_]+$", re.IGNORECASE)


def is_placeholder(value: str | None) -> bool:
    if value is None:
        return False
    return bool(_PLACEHOLDER_RE.fullmatch(value.strip()))


def clean_setting(value: str | None) -> str | None:
    """Return `value` stripped, or None when it is blank or a documentation placeholder."""
    if value is None:
        return None
    value = value.strip()
    if not value or is_placeholder(value):
        return None
    return value


class GatewaySettings(BaseModel):
    # Hosted providers
    groq_api_key: str | None = Field(default_factory=lambda: os.getenv("GROQ_API_KEY"))
    groq_model: str | None = Field(default_factory=lambda: os.getenv("GROQ_MODEL"))
    groq_base_url: str | None = Field(default_factory=lambda: os.getenv("GROQ_BASE_URL"))

    openai_api_key: str | None = Field(default_factory=lambda: os.getenv("OPENAI_API_KEY"))
    openai_model: str | None = Field(default_factory=lambda: os.getenv("OPENAI_MODEL"))
    openai_base_url: str | None = Field(default_factory=lambda: os.getenv("OPENAI_BASE_URL"))

    together_api_key: str | None = Field(default_factory=lambda: os.getenv("TOGETHER_API_KEY"))
    together_model: str | None = Field(default_factory=lambda: os.getenv("TOGETHER_MODEL"))
    together_base_url: str | None = Field(default_factory=lambda: os.getenv("TOGETHER_BASE_URL"))

    huggingface_api_key: str | None = Field(default_factory=lambda: os.getenv("HUGGINGFACE_API_KEY"))
    huggingface_model: str | None = Field(default_factory=lambda: os.getenv("HUGGINGFACE_MODEL"))
    huggingface_base_url: str | None = Field(default_factory=lambda: os.getenv("HUGGINGFACE_BASE_URL"))

    # Selection
    ai_provider: str | None = Field(default_factory=lambda: os.getenv("AI_PROVIDER"))

    # Cloud HTTP behavior
    request_timeout_seconds: float = Field(
        default_factory=lambda: float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30"))
    )

    # Local model server
    ollama_base_url: str = Field(default_factory=lambda: os.getenv("OLLAMA_BASE_URL", "http://localhost:11434"))
    ollama_model: str = Field(default_factory=lambda: os.getenv("OLLAMA_MODEL", "llama3.2"))
    local_generation_timeout_seconds: float = Field(
        default_factory=lambda: float(os.getenv("LOCAL_GENERATION_TIMEOUT_SECONDS", "60"))
    )
    local_probe_timeout_seconds: float = Field(
        default_factory=lambda: float(os.getenv("LOCAL_PROBE_TIMEOUT_SECONDS", "3"))
    )
    local_list_timeout_seconds: float = Field(
        default_factory=lambda: float(os.getenv("LOCAL_LIST_TIMEOUT_SECONDS", "10"))
    )

    # Observability
    enable_metrics: bool = Field(
        default_factory=lambda: os.getenv("ENABLE_METRICS", "false").lower() == "true"
    )
    metrics_bind: str = Field(default_factory=lambda: os.getenv("METRICS_BIND", "127.0.0.1"))
    metrics_port: int = Field(default_factory=lambda: int(os.getenv("METRICS_PORT", "9109")))
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_format: str = Field(default_factory=lambda: os.getenv("LOG_FORMAT", "json"))

    def provider_setting(self, provider_id: str, name: str) -> str | None:
        """Look up `<provider_id>_<name>` (e.g. `groq_api_key`) with placeholders treated as unset."""
        return clean_setting(getattr(self, f"{provider_id}_{name}", None))

    def preferred_provider(self) -> str | None:
        value = clean_setting(self.ai_provider)
        return value.lower() if value else None

    def credentials(self) -> list[str]:
        keys = (self.groq_api_key, self.openai_api_key, self.together_api_key, self.huggingface_api_key)
        return [k for k in (clean_setting(v) for v in keys) if k]
