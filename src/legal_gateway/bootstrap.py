from __future__ import annotations

from dataclasses import dataclass

import httpx
import structlog

from .assistant import LegalAssistant
from .config import GatewaySettings
from .contracts import CompletionBackend
from .gateway import CompletionGateway
from .local import LocalModelGateway
from .logging import configure_logging
from .metrics import maybe_start_metrics
from .registry import ProviderRegistry
from .selector import ProviderSelector

log = structlog.get_logger()

LOCAL_PROVIDER_ID = "ollama"


@dataclass
class Application:
    settings: GatewaySettings
    registry: ProviderRegistry
    gateway: CompletionGateway
    local: LocalModelGateway
    assistant: LegalAssistant

    async def close(self) -> None:
        await self.gateway.close()
        await self.local.close()


def create_application(
    settings: GatewaySettings | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    local_client: httpx.AsyncClient | None = None,
    start_metrics: bool = True,
) -> Application:
    """Wire the gateway stack from settings. Callers own the result and must `close()` it."""
    settings = settings or GatewaySettings()
    configure_logging(level=settings.log_level, fmt=settings.log_format, secrets=settings.credentials())
    if start_metrics:
        maybe_start_metrics(enable=settings.enable_metrics, bind=settings.metrics_bind, port=settings.metrics_port)

    registry = ProviderRegistry.build(settings)
    preferred = settings.preferred_provider()
    selector = ProviderSelector(registry, preferred)
    gateway = CompletionGateway(
        registry,
        selector,
        client=client,
        timeout_seconds=settings.request_timeout_seconds,
    )
    local = LocalModelGateway(
        settings.ollama_base_url,
        settings.ollama_model,
        client=local_client,
        generation_timeout_seconds=settings.local_generation_timeout_seconds,
        probe_timeout_seconds=settings.local_probe_timeout_seconds,
        list_timeout_seconds=settings.local_list_timeout_seconds,
    )

    backend: CompletionBackend = local if preferred == LOCAL_PROVIDER_ID else gateway
    log.info(
        "application_ready",
        backend=LOCAL_PROVIDER_ID if backend is local else selector.active_id,
        configured=gateway.is_configured(),
    )
    return Application(
        settings=settings,
        registry=registry,
        gateway=gateway,
        local=local,
        assistant=LegalAssistant(backend),
    )
