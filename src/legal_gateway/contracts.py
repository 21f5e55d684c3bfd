from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal, Protocol, runtime_checkable

from .errors import ConfigurationError, ErrorKind, GatewayError

Role = Literal["system", "user", "assistant"]
ROLES: tuple[str, ...] = ("system", "user", "assistant")


@dataclass(frozen=True)
class Message:
    role: Role
    content: str

    def as_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class CompletionOptions:
    temperature: float = 0.7
    max_output_tokens: int = 1500


@dataclass(frozen=True)
class Usage:
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass(frozen=True)
class CompletionResult:
    text: str
    provider_id: str
    model: str
    latency_seconds: float = 0.0
    usage: Usage | None = None


@dataclass(frozen=True)
class CompletionOutcome:
    """Either a result or the typed error that replaced it."""

    result: CompletionResult | None = None
    error: GatewayError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> ErrorKind | None:
        return self.error.kind if self.error is not None else None


@dataclass(frozen=True)
class GatewayStatus:
    configured: bool
    message: str
    active_provider_id: str | None = None
    available_ids: list[str] = field(default_factory=list)


class CompletionBackend(Protocol):
    async def complete(
        self,
        messages: Sequence[Message],
        options: CompletionOptions | None = None,
    ) -> CompletionResult: ...


@runtime_checkable
class LegalCompletionBackend(CompletionBackend, Protocol):
    """A backend with its own prompt format for structured legal answers."""

    async def complete_legal(
        self,
        question: str,
        jurisdiction: str,
        context: str | None = None,
    ) -> CompletionResult: ...


def validate_messages(messages: Sequence[Message]) -> list[Message]:
    out: list[Message] = []
    for msg in messages:
        if msg.role not in ROLES:
            raise ConfigurationError(f"Unsupported message role: {msg.role!r}")
        if not isinstance(msg.content, str):
            raise ConfigurationError("Message content must be a string.")
        out.append(msg)
    if not out:
        raise ConfigurationError("No messages provided.")
    return out
