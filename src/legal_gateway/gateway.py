from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence
from typing import Any

import httpx
import structlog

from .contracts import (
    CompletionOptions,
    CompletionOutcome,
    CompletionResult,
    GatewayStatus,
    Message,
    validate_messages,
)
from .dialects import Dialect
from .errors import (
    ConnectionFailureError,
    GatewayError,
    InvalidResponseFormatError,
    NotConfiguredError,
    ProviderError,
    RequestTimeoutError,
)
from .metrics import request_latency_seconds, requests_total
from .registry import KNOWN_PROVIDERS, ProviderDescriptor, ProviderRegistry
from .selector import ProviderSelector
from .wire import (
    DecodedCompletion,
    decode_chat_completions,
    decode_raw_generation,
    make_chat_completions_body,
    make_raw_generation_body,
)

log = structlog.get_logger()

DEFAULT_TIMEOUT_SECONDS = 30.0


def _not_configured_message() -> str:
    env_keys = ", ".join(f"{kind.id.upper()}_API_KEY" for kind in KNOWN_PROVIDERS)
    names = ", ".join(kind.display_name for kind in KNOWN_PROVIDERS)
    return (
        "No cloud AI providers configured: no API key was found. "
        f"Set one of {env_keys} to enable {names}."
    )


class CompletionGateway:
    """
    Sends a conversation to the active hosted provider and returns normalized text.

    One request per call, no retries and no fallback to another provider: every
    failure surfaces as a `GatewayError` subclass.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        selector: ProviderSelector | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.registry = registry
        self.selector = selector or ProviderSelector(registry)
        self._timeout_seconds = timeout_seconds
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

    async def close(self) -> None:
        await self._client.aclose()

    def is_configured(self) -> bool:
        return len(self.registry) > 0 and self.selector.current() is not None

    def status(self) -> GatewayStatus:
        provider = self.selector.current()
        if provider is None or not self.is_configured():
            return GatewayStatus(configured=False, message=_not_configured_message())

        return GatewayStatus(
            configured=True,
            active_provider_id=provider.id,
            available_ids=self.registry.ids(),
            message=f"Using {provider.display_name} ({provider.model}) for AI-powered legal assistance.",
        )

    def switch_provider(self, provider_id: str) -> bool:
        return self.selector.switch(provider_id)

    def current_provider(self) -> ProviderDescriptor | None:
        return self.selector.current()

    async def complete(
        self,
        messages: Sequence[Message],
        options: CompletionOptions | None = None,
    ) -> CompletionResult:
        # Resolve once; a switch while this call is in flight only affects later calls.
        provider = self.selector.current()
        if provider is None or not self.is_configured():
            raise NotConfiguredError()

        options = options or CompletionOptions()
        chat_messages = validate_messages(messages)
        start = time.monotonic()
        try:
            with request_latency_seconds.labels(provider=provider.id).time():
                decoded = await self._dispatch(provider, chat_messages, options)
        except GatewayError as e:
            requests_total.labels(provider=provider.id, status=e.kind.value).inc()
            log.warning("completion_failed", provider=provider.id, kind=e.kind.value, error=str(e))
            raise

        latency = time.monotonic() - start
        requests_total.labels(provider=provider.id, status="success").inc()
        log.debug(
            "completion_ok",
            provider=provider.id,
            model=provider.model,
            shape=decoded.shape,
            prompt_chars=sum(len(m.content) for m in chat_messages),
            latency_seconds=round(latency, 3),
        )
        return CompletionResult(
            text=decoded.text,
            provider_id=provider.id,
            model=provider.model,
            latency_seconds=latency,
            usage=decoded.usage,
        )

    async def try_complete(
        self,
        messages: Sequence[Message],
        options: CompletionOptions | None = None,
    ) -> CompletionOutcome:
        try:
            return CompletionOutcome(result=await self.complete(messages, options))
        except GatewayError as e:
            return CompletionOutcome(error=e)

    async def _dispatch(
        self,
        provider: ProviderDescriptor,
        messages: list[Message],
        options: CompletionOptions,
    ) -> DecodedCompletion:
        if provider.dialect is Dialect.CHAT_COMPLETIONS:
            url = f"{provider.base_url}/chat/completions"
            payload = make_chat_completions_body(provider.model, messages, options)
        else:
            url = f"{provider.base_url}/{provider.model}"
            payload = make_raw_generation_body(messages, options)

        resp = await self._post(provider, url, payload)

        if not resp.is_success:
            raise ProviderError(provider.display_name, resp.status_code, resp.text)

        try:
            data = resp.json()
        except ValueError as e:
            raise InvalidResponseFormatError(provider.display_name) from e

        if provider.dialect is Dialect.CHAT_COMPLETIONS:
            decoded = decode_chat_completions(data)
        else:
            decoded = decode_raw_generation(data)
        if decoded is None:
            raise InvalidResponseFormatError(provider.display_name)
        return decoded

    async def _post(self, provider: ProviderDescriptor, url: str, payload: dict[str, Any]) -> httpx.Response:
        try:
            return await asyncio.wait_for(
                self._client.post(url, headers=dict(provider.headers), json=payload),
                timeout=self._timeout_seconds,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise RequestTimeoutError(provider.display_name, self._timeout_seconds) from e
        except httpx.TransportError as e:
            raise ConnectionFailureError(provider.display_name) from e
