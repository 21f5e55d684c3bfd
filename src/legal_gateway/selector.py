from __future__ import annotations

import structlog

from .registry import ProviderDescriptor, ProviderRegistry

log = structlog.get_logger()

# Free / fast tiers first, paid last.
FALLBACK_ORDER: tuple[str, ...] = ("groq", "together", "huggingface", "openai")


def select_initial(registry: ProviderRegistry, preferred_id: str | None = None) -> str | None:
    if preferred_id and preferred_id in registry:
        return preferred_id
    for provider_id in FALLBACK_ORDER:
        if provider_id in registry:
            return provider_id
    return None


class ProviderSelector:
    def __init__(self, registry: ProviderRegistry, preferred_id: str | None = None):
        self.registry = registry
        self._active_id = select_initial(registry, preferred_id)
        if preferred_id and self._active_id != preferred_id:
            log.info("preferred_provider_unavailable", preferred=preferred_id, selected=self._active_id)

    @property
    def active_id(self) -> str | None:
        return self._active_id

    def switch(self, provider_id: str) -> bool:
        if provider_id not in self.registry:
            log.warning("provider_switch_rejected", provider=provider_id, available=self.registry.ids())
            return False
        self._active_id = provider_id
        log.info("provider_switched", provider=provider_id)
        return True

    def current(self) -> ProviderDescriptor | None:
        if self._active_id is None:
            return None
        return self.registry.get(self._active_id)
