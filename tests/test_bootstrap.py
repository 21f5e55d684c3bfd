import httpx
import pytest
import structlog

from legal_gateway.bootstrap import create_application
from legal_gateway.config import GatewaySettings
from legal_gateway.gateway import CompletionGateway
from legal_gateway.local import LocalModelGateway

_PROVIDER_KEYS = {
    f"{provider}_{name}": None
    for provider in ("groq", "openai", "together", "huggingface")
    for name in ("api_key", "model", "base_url")
}


def _settings(**overrides) -> GatewaySettings:
    values = {**_PROVIDER_KEYS, "ai_provider": None, "enable_metrics": False, "log_format": "console"}
    values.update(overrides)
    return GatewaySettings(**values)


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(lambda _: httpx.Response(500)))


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.mark.asyncio
async def test_cloud_gateway_is_default_backend():
    app = create_application(
        _settings(together_api_key="tg-key"),
        client=_client(),
        local_client=_client(),
        start_metrics=False,
    )
    try:
        assert isinstance(app.assistant.backend, CompletionGateway)
        assert app.assistant.backend is app.gateway
        assert app.gateway.current_provider().id == "together"
        assert app.registry.ids() == ["together"]
    finally:
        await app.close()


@pytest.mark.asyncio
async def test_local_backend_when_preferred():
    app = create_application(
        _settings(ai_provider="Ollama", ollama_base_url="http://ollama.test:11434"),
        client=_client(),
        local_client=_client(),
        start_metrics=False,
    )
    try:
        assert isinstance(app.assistant.backend, LocalModelGateway)
        assert app.assistant.backend is app.local
        assert app.gateway.is_configured() is False
    finally:
        await app.close()
