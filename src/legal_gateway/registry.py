from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

import structlog

from .config import GatewaySettings
from .dialects import Dialect

log = structlog.get_logger()


@dataclass(frozen=True)
class ProviderKind:
    id: str
    display_name: str
    base_url: str
    default_model: str
    dialect: Dialect


KNOWN_PROVIDERS: tuple[ProviderKind, ...] = (
    ProviderKind("groq", "Groq", "https://api.groq.com/openai/v1", "llama-3.1-8b-instant", Dialect.CHAT_COMPLETIONS),
    ProviderKind("openai", "OpenAI", "https://api.openai.com/v1", "gpt-4o-mini", Dialect.CHAT_COMPLETIONS),
    ProviderKind(
        "together",
        "Together AI",
        "https://api.together.xyz/v1",
        "meta-llama/Llama-3-8b-chat-hf",
        Dialect.CHAT_COMPLETIONS,
    ),
    ProviderKind(
        "huggingface",
        "Hugging Face",
        "https://api-inference.huggingface.co/models",
        "microsoft/DialoGPT-large",
        Dialect.RAW_GENERATION,
    ),
)


def build_headers(dialect: Dialect, credential: str) -> dict[str, str]:
    # Both hosted dialects take a bearer token; only the body shape differs.
    return {"Authorization": f"Bearer {credential}", "Content-Type": "application/json"}


@dataclass(frozen=True)
class ProviderDescriptor:
    id: str
    display_name: str
    base_url: str
    model: str
    dialect: Dialect
    credential: str = field(repr=False)
    headers: Mapping[str, str] = field(default_factory=dict, repr=False)

    @classmethod
    def create(
        cls,
        *,
        id: str,
        display_name: str,
        base_url: str,
        model: str,
        dialect: Dialect,
        credential: str,
    ) -> ProviderDescriptor:
        return cls(
            id=id,
            display_name=display_name,
            base_url=base_url.rstrip("/"),
            model=model,
            dialect=dialect,
            credential=credential,
            headers=MappingProxyType(build_headers(dialect, credential)),
        )


@dataclass(frozen=True)
class ProviderListing:
    id: str
    name: str
    model: str
    configured: bool


class ProviderRegistry:
    """Read-only set of usable providers, built once at startup."""

    def __init__(self, descriptors: list[ProviderDescriptor] | None = None):
        providers: dict[str, ProviderDescriptor] = {}
        for d in descriptors or []:
            if d.id in providers:
                raise ValueError(f"Duplicate provider id: {d.id!r}")
            providers[d.id] = d
        self._providers: Mapping[str, ProviderDescriptor] = MappingProxyType(providers)

    @classmethod
    def build(cls, settings: GatewaySettings) -> ProviderRegistry:
        descriptors: list[ProviderDescriptor] = []
        for kind in KNOWN_PROVIDERS:
            credential = settings.provider_setting(kind.id, "api_key")
            if credential is None:
                continue
            descriptors.append(
                ProviderDescriptor.create(
                    id=kind.id,
                    display_name=kind.display_name,
                    base_url=settings.provider_setting(kind.id, "base_url") or kind.base_url,
                    model=settings.provider_setting(kind.id, "model") or kind.default_model,
                    dialect=kind.dialect,
                    credential=credential,
                )
            )
        registry = cls(descriptors)
        log.info("provider_registry_built", providers=registry.ids())
        return registry

    def ids(self) -> list[str]:
        return list(self._providers)

    def get(self, provider_id: str) -> ProviderDescriptor | None:
        return self._providers.get(provider_id)

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._providers

    def __len__(self) -> int:
        return len(self._providers)

    def __iter__(self) -> Iterator[ProviderDescriptor]:
        return iter(self._providers.values())

    def catalog(self) -> list[ProviderListing]:
        out: list[ProviderListing] = []
        for kind in KNOWN_PROVIDERS:
            d = self._providers.get(kind.id)
            out.append(
                ProviderListing(
                    id=kind.id,
                    name=kind.display_name,
                    model=d.model if d is not None else kind.default_model,
                    configured=d is not None,
                )
            )
        return out
