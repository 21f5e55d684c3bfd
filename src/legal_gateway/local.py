from __future__ import annotations

import asyncio
import inspect
import time
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from .contracts import CompletionOptions, CompletionResult, Message, validate_messages
from .errors import (
    ConnectionFailureError,
    GatewayError,
    InvalidResponseFormatError,
    ProviderError,
    RequestTimeoutError,
)
from .metrics import local_requests_total
from .prompts import LEGAL_OPTIONS, build_local_legal_prompt, build_local_legal_system_prompt
from .streaming import iter_ndjson
from .wire import (
    LocalChatResponse,
    LocalModel,
    LocalPullProgress,
    LocalResponse,
    LocalTags,
    make_local_options,
)

log = structlog.get_logger()

DEFAULT_LOCAL_BASE_URL = "http://localhost:11434"
DEFAULT_LOCAL_MODEL = "llama3.2"

ChunkCallback = Callable[[LocalResponse], Awaitable[None] | None]
ProgressCallback = Callable[[str], Awaitable[None] | None]


@dataclass(frozen=True)
class LocalStatus:
    configured: bool
    message: str
    base_url: str
    model: str
    available_models: list[str] | None = None
    connection_error: bool = False


@dataclass(frozen=True)
class RecommendedModel:
    name: str
    description: str
    size: str


RECOMMENDED_MODELS: tuple[RecommendedModel, ...] = (
    RecommendedModel("llama3.2", "Meta Llama 3.2 - improved reasoning and legal knowledge", "2.0GB"),
    RecommendedModel("llama3.2:3b", "Meta Llama 3.2 3B - compact version for faster responses", "2.0GB"),
    RecommendedModel("llama3.1:8b", "Meta Llama 3.1 8B - balance of quality and speed", "4.7GB"),
    RecommendedModel("llama3.1:70b", "Meta Llama 3.1 70B - highest quality, needs more resources", "40GB"),
    RecommendedModel("mistral:7b", "Mistral 7B - fast and efficient for legal analysis", "4.1GB"),
    RecommendedModel("phi3:14b", "Microsoft Phi-3 14B - tuned for reasoning tasks", "7.9GB"),
)


def model_name_matches(installed: str, wanted: str) -> bool:
    return installed == wanted or installed.startswith(wanted) or installed == f"{wanted}:latest"


async def _maybe_await(value: Awaitable[None] | None) -> None:
    if inspect.isawaitable(value):
        await value


class LocalModelGateway:
    """
    Client for a locally running Ollama server.

    Local inference is slow, so generation gets a longer deadline than the
    hosted providers; availability and listing probes get short ones.
    """

    name = "Ollama"
    provider_id = "ollama"

    def __init__(
        self,
        base_url: str = DEFAULT_LOCAL_BASE_URL,
        default_model: str = DEFAULT_LOCAL_MODEL,
        *,
        client: httpx.AsyncClient | None = None,
        generation_timeout_seconds: float = 60.0,
        probe_timeout_seconds: float = 3.0,
        list_timeout_seconds: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.default_model = default_model
        self._generation_timeout = generation_timeout_seconds
        self._probe_timeout = probe_timeout_seconds
        self._list_timeout = list_timeout_seconds
        self._client = client or httpx.AsyncClient(timeout=generation_timeout_seconds)

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        timeout: float,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        endpoint = path.rsplit("/", 1)[-1]
        try:
            resp = await asyncio.wait_for(
                self._client.request(method, f"{self.base_url}{path}", json=json, timeout=timeout),
                timeout=timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            local_requests_total.labels(endpoint=endpoint, status="timeout").inc()
            raise RequestTimeoutError(
                self.name, timeout, f"{self.name} request timeout - the model may be slow to respond"
            ) from e
        except httpx.TransportError as e:
            local_requests_total.labels(endpoint=endpoint, status="connection_failure").inc()
            raise ConnectionFailureError(
                self.name, f"Cannot connect to {self.name} at {self.base_url} - please ensure it is running"
            ) from e

        if not resp.is_success:
            local_requests_total.labels(endpoint=endpoint, status="provider_error").inc()
            raise ProviderError(self.name, resp.status_code, resp.text)
        local_requests_total.labels(endpoint=endpoint, status="success").inc()
        return resp

    def _parse(self, resp: httpx.Response, model_cls: Any) -> Any:
        try:
            return model_cls.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise InvalidResponseFormatError(self.name) from e

    async def is_available(self) -> bool:
        try:
            await self._request("GET", "/api/tags", timeout=self._probe_timeout)
        except GatewayError as e:
            log.warning("local_model_unavailable", base_url=self.base_url, kind=e.kind.value, error=str(e))
            return False
        return True

    async def list_models(self) -> list[LocalModel]:
        resp = await self._request("GET", "/api/tags", timeout=self._list_timeout)
        tags: LocalTags = self._parse(resp, LocalTags)
        return tags.models

    async def is_model_available(self, name: str) -> bool:
        try:
            models = await self.list_models()
        except GatewayError:
            return False
        return any(model_name_matches(m.name, name) for m in models)

    async def generate(
        self,
        prompt: str,
        *,
        model: str | None = None,
        system: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ) -> LocalResponse:
        payload: dict[str, Any] = {
            "model": model or self.default_model,
            "prompt": prompt,
            "options": make_local_options(temperature, max_tokens),
            "stream": False,
        }
        if system is not None:
            payload["system"] = system
        resp = await self._request("POST", "/api/generate", timeout=self._generation_timeout, json=payload)
        return self._parse(resp, LocalResponse)

    async def chat(
        self,
        messages: Sequence[Message],
        *,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ) -> CompletionResult:
        chat_messages = validate_messages(messages)
        model_name = model or self.default_model
        payload = {
            "model": model_name,
            "messages": [m.as_dict() for m in chat_messages],
            "options": make_local_options(temperature, max_tokens),
            "stream": False,
        }
        start = time.monotonic()
        resp = await self._request("POST", "/api/chat", timeout=self._generation_timeout, json=payload)
        parsed: LocalChatResponse = self._parse(resp, LocalChatResponse)
        return CompletionResult(
            text=parsed.message.content,
            provider_id=self.provider_id,
            model=parsed.model or model_name,
            latency_seconds=time.monotonic() - start,
            usage=parsed.usage(),
        )

    async def complete(
        self,
        messages: Sequence[Message],
        options: CompletionOptions | None = None,
    ) -> CompletionResult:
        options = options or CompletionOptions()
        try:
            return await self.chat(
                messages,
                temperature=options.temperature,
                max_tokens=options.max_output_tokens,
            )
        except GatewayError as e:
            log.warning("completion_failed", provider=self.provider_id, kind=e.kind.value, error=str(e))
            raise

    async def complete_legal(
        self,
        question: str,
        jurisdiction: str,
        context: str | None = None,
    ) -> CompletionResult:
        """Answer a legal question through `/api/generate` with the local prompt format."""
        start = time.monotonic()
        try:
            res = await self.generate(
                build_local_legal_prompt(question, jurisdiction),
                system=build_local_legal_system_prompt(jurisdiction, context),
                temperature=LEGAL_OPTIONS.temperature,
                max_tokens=LEGAL_OPTIONS.max_output_tokens,
            )
        except GatewayError as e:
            log.warning("completion_failed", provider=self.provider_id, kind=e.kind.value, error=str(e))
            raise
        return CompletionResult(
            text=res.response,
            provider_id=self.provider_id,
            model=res.model or self.default_model,
            latency_seconds=time.monotonic() - start,
            usage=res.usage(),
        )

    async def _stream_lines(self, path: str, payload: dict[str, Any]) -> AsyncIterator[dict[str, Any]]:
        endpoint = path.rsplit("/", 1)[-1]
        try:
            async with self._client.stream(
                "POST", f"{self.base_url}{path}", json=payload, timeout=self._generation_timeout
            ) as resp:
                if not resp.is_success:
                    await resp.aread()
                    local_requests_total.labels(endpoint=endpoint, status="provider_error").inc()
                    raise ProviderError(self.name, resp.status_code, resp.text)
                async for obj in iter_ndjson(resp.aiter_lines()):
                    yield obj
        except httpx.TimeoutException as e:
            local_requests_total.labels(endpoint=endpoint, status="timeout").inc()
            raise RequestTimeoutError(self.name, self._generation_timeout) from e
        except httpx.TransportError as e:
            local_requests_total.labels(endpoint=endpoint, status="connection_failure").inc()
            raise ConnectionFailureError(
                self.name, f"Cannot connect to {self.name} at {self.base_url} - please ensure it is running"
            ) from e
        local_requests_total.labels(endpoint=endpoint, status="success").inc()

    async def stream_generate(
        self,
        prompt: str,
        *,
        model: str | None = None,
        system: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ) -> AsyncIterator[LocalResponse]:
        """Yield streamed chunks in order, ending with the first chunk marked `done`."""
        payload: dict[str, Any] = {
            "model": model or self.default_model,
            "prompt": prompt,
            "options": make_local_options(temperature, max_tokens),
            "stream": True,
        }
        if system is not None:
            payload["system"] = system

        lines = self._stream_lines("/api/generate", payload)
        try:
            async for obj in lines:
                try:
                    chunk = LocalResponse.model_validate(obj)
                except ValidationError:
                    log.debug("local_stream_chunk_skipped")
                    continue
                yield chunk
                if chunk.done:
                    return
        finally:
            await lines.aclose()

    async def generate_stream(
        self,
        prompt: str,
        on_chunk: ChunkCallback,
        *,
        model: str | None = None,
        system: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ) -> None:
        chunks = self.stream_generate(
            prompt, model=model, system=system, temperature=temperature, max_tokens=max_tokens
        )
        try:
            async for chunk in chunks:
                await _maybe_await(on_chunk(chunk))
                if chunk.done:
                    break
        finally:
            await chunks.aclose()

    async def pull_model(self, name: str, on_progress: ProgressCallback | None = None) -> None:
        lines = self._stream_lines("/api/pull", {"name": name, "stream": True})
        try:
            async for obj in lines:
                try:
                    progress = LocalPullProgress.model_validate(obj)
                except ValidationError:
                    continue
                if on_progress is not None:
                    await _maybe_await(on_progress(progress.status))
        finally:
            await lines.aclose()
        log.info("local_model_pulled", model=name)

    async def status(self) -> LocalStatus:
        if not await self.is_available():
            return LocalStatus(
                configured=False,
                message=(
                    f'{self.name} is not running or not accessible. Start it with "ollama serve" '
                    f"and make sure it listens on {self.base_url}"
                ),
                base_url=self.base_url,
                model=self.default_model,
                connection_error=True,
            )

        try:
            models = await self.list_models()
        except GatewayError as e:
            return LocalStatus(
                configured=False,
                message=f"Error checking {self.name} configuration: {e}",
                base_url=self.base_url,
                model=self.default_model,
                connection_error=isinstance(e, (ConnectionFailureError, RequestTimeoutError)),
            )

        names = [m.name for m in models]
        if not names:
            return LocalStatus(
                configured=False,
                message=(
                    f"{self.name} is running but no models are installed. "
                    f'Install one with "ollama pull {self.default_model}"'
                ),
                base_url=self.base_url,
                model=self.default_model,
                available_models=[],
            )

        if not any(model_name_matches(n, self.default_model) for n in names):
            return LocalStatus(
                configured=False,
                message=(
                    f"Model '{self.default_model}' is not available. Available models: {', '.join(names)}. "
                    f'Install with "ollama pull {self.default_model}"'
                ),
                base_url=self.base_url,
                model=self.default_model,
                available_models=names,
            )

        return LocalStatus(
            configured=True,
            message=f"{self.name} is ready with {len(names)} model(s). Using: {self.default_model}",
            base_url=self.base_url,
            model=self.default_model,
            available_models=names,
        )

    def recommended_models(self) -> list[RecommendedModel]:
        return list(RECOMMENDED_MODELS)
