from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping, MutableMapping
from typing import Any

import structlog

from .errors import ConfigurationError

REDACTED = "[REDACTED]"

LOG_FORMATS: tuple[str, ...] = ("json", "console")

_SENSITIVE_KEYS = frozenset(
    {"authorization", "headers", "api_key", "apikey", "credential", "credentials", "token", "secret", "password"}
)
_SENSITIVE_SUFFIXES = ("_api_key", "_credential", "_secret", "_password", "_token")

_BEARER_RE = re.compile(r"(?i)\bBearer\s+[A-Za-z0-9._-]{6,}")
# Groq (gsk_), OpenAI (sk-) and Hugging Face (hf_) keys, caught even when not configured here.
_PROVIDER_KEY_RE = re.compile(r"\b(?:gsk_|sk-|hf_)[A-Za-z0-9_-]{16,}")


def is_sensitive_key(key: Any) -> bool:
    # `prompt_tokens` and friends are usage counters.
    name = str(key).lower()
    if name.endswith("_tokens"):
        return False
    return name in _SENSITIVE_KEYS or name.endswith(_SENSITIVE_SUFFIXES)


class CredentialRedactor:
    """
    structlog processor that masks provider credentials.

    Upstream error bodies are logged verbatim and sometimes echo the request's
    key back, so string values are scrubbed as well as credential-named fields.
    """

    def __init__(self, secrets: Iterable[str] = ()):
        known = sorted({s for s in secrets if s}, key=len, reverse=True)
        self._secret_re = re.compile("|".join(re.escape(s) for s in known)) if known else None

    def redact_text(self, value: str) -> str:
        if self._secret_re is not None:
            value = self._secret_re.sub(REDACTED, value)
        value = _BEARER_RE.sub(f"Bearer {REDACTED}", value)
        return _PROVIDER_KEY_RE.sub(REDACTED, value)

    def redact(self, value: Any) -> Any:
        if isinstance(value, str):
            return self.redact_text(value)
        if isinstance(value, Mapping):
            return {k: REDACTED if is_sensitive_key(k) else self.redact(v) for k, v in value.items()}
        if isinstance(value, list):
            return [self.redact(v) for v in value]
        if isinstance(value, tuple):
            return tuple(self.redact(v) for v in value)
        return value

    def __call__(self, _logger: Any, _method_name: str, event_dict: MutableMapping[str, Any]) -> Mapping[str, Any]:
        return self.redact(event_dict)


def configure_logging(level: str = "INFO", fmt: str = "json", *, secrets: Iterable[str] = ()) -> None:
    """Route structlog through `CredentialRedactor`; provider keys never reach the output."""
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ConfigurationError(f"Unknown log level: {level!r}")
    if fmt not in LOG_FORMATS:
        raise ConfigurationError(f"Unknown log format: {fmt!r} (expected one of: {', '.join(LOG_FORMATS)})")

    logging.basicConfig(level=numeric_level)
    renderer = structlog.processors.JSONRenderer() if fmt == "json" else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            CredentialRedactor(secrets),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        cache_logger_on_first_use=True,
    )
