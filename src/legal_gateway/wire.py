from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .contracts import CompletionOptions, Message, Usage


class WireMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class ChatCompletionsRequest(BaseModel):
    model: str
    messages: list[WireMessage]
    temperature: float
    max_tokens: int
    stream: Literal[False] = False


class RawGenerationParameters(BaseModel):
    temperature: float
    max_new_tokens: int
    return_full_text: bool = False


class RawGenerationRequest(BaseModel):
    inputs: str
    parameters: RawGenerationParameters


class WireUsage(BaseModel):
    model_config = ConfigDict(extra="allow")

    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None

    def to_usage(self) -> Usage:
        prompt = self.prompt_tokens or 0
        completion = self.completion_tokens or 0
        total = self.total_tokens if self.total_tokens is not None else prompt + completion
        return Usage(prompt_tokens=prompt, completion_tokens=completion, total_tokens=total)


class ChatCompletionsAssistantMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    content: str


class ChatCompletionsChoice(BaseModel):
    model_config = ConfigDict(extra="allow")

    message: ChatCompletionsAssistantMessage


class ChatCompletionsResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    choices: Annotated[list[ChatCompletionsChoice], Field(min_length=1)]
    # Decoded on its own; a malformed usage block never rejects the text.
    usage: Any = None


class GeneratedText(BaseModel):
    model_config = ConfigDict(extra="allow")

    generated_text: str


def make_chat_completions_body(model: str, messages: Sequence[Message], options: CompletionOptions) -> dict[str, Any]:
    body = ChatCompletionsRequest(
        model=model,
        messages=[WireMessage(role=m.role, content=m.content) for m in messages],
        temperature=options.temperature,
        max_tokens=options.max_output_tokens,
    )
    return body.model_dump()


def flatten_messages(messages: Sequence[Message]) -> str:
    return "\n".join(f"{m.role}: {m.content}" for m in messages)


def make_raw_generation_body(messages: Sequence[Message], options: CompletionOptions) -> dict[str, Any]:
    body = RawGenerationRequest(
        inputs=flatten_messages(messages),
        parameters=RawGenerationParameters(
            temperature=options.temperature,
            max_new_tokens=options.max_output_tokens,
        ),
    )
    return body.model_dump()


@dataclass(frozen=True)
class DecodedCompletion:
    text: str
    shape: str
    usage: Usage | None = None


def _decode_usage(raw: Any) -> Usage | None:
    if raw is None:
        return None
    try:
        return WireUsage.model_validate(raw).to_usage()
    except ValidationError:
        return None


def decode_chat_completions(data: Any) -> DecodedCompletion | None:
    try:
        parsed = ChatCompletionsResponse.model_validate(data)
    except ValidationError:
        return None
    usage = _decode_usage(parsed.usage)
    return DecodedCompletion(text=parsed.choices[0].message.content, shape="choices", usage=usage)


# Tried in this order; the first schema that validates wins. Only the first
# element of the list shape carries the text.
RAW_GENERATION_SCHEMAS: tuple[tuple[str, TypeAdapter[Any]], ...] = (
    ("list", TypeAdapter(Annotated[list[Any], Field(min_length=1)])),
    ("object", TypeAdapter(GeneratedText)),
)


def decode_raw_generation(data: Any) -> DecodedCompletion | None:
    for shape, adapter in RAW_GENERATION_SCHEMAS:
        try:
            parsed = adapter.validate_python(data)
            item = GeneratedText.model_validate(parsed[0]) if shape == "list" else parsed
        except ValidationError:
            continue
        return DecodedCompletion(text=item.generated_text, shape=shape)
    return None


def _local_usage(prompt_eval_count: int | None, eval_count: int | None) -> Usage | None:
    if prompt_eval_count is None and eval_count is None:
        return None
    prompt = prompt_eval_count or 0
    completion = eval_count or 0
    return Usage(prompt_tokens=prompt, completion_tokens=completion, total_tokens=prompt + completion)


class LocalModelDetails(BaseModel):
    model_config = ConfigDict(extra="allow")

    format: str | None = None
    family: str | None = None
    families: list[str] | None = None
    parameter_size: str | None = None
    quantization_level: str | None = None


class LocalModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    size: int | str | None = None
    digest: str | None = None
    modified_at: str | None = None
    details: LocalModelDetails | None = None


class LocalTags(BaseModel):
    model_config = ConfigDict(extra="allow")

    models: list[LocalModel] = Field(default_factory=list)


class LocalResponse(BaseModel):
    """One `/api/generate` object; also the shape of each streamed chunk."""

    model_config = ConfigDict(extra="allow")

    model: str | None = None
    created_at: str | None = None
    response: str = ""
    done: bool = False
    context: list[int] | None = None
    total_duration: int | None = None
    load_duration: int | None = None
    prompt_eval_count: int | None = None
    prompt_eval_duration: int | None = None
    eval_count: int | None = None
    eval_duration: int | None = None

    def usage(self) -> Usage | None:
        return _local_usage(self.prompt_eval_count, self.eval_count)


class LocalChatMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    role: str = "assistant"
    content: str


class LocalChatResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    model: str | None = None
    message: LocalChatMessage
    done: bool = True
    prompt_eval_count: int | None = None
    eval_count: int | None = None

    def usage(self) -> Usage | None:
        return _local_usage(self.prompt_eval_count, self.eval_count)


class LocalPullProgress(BaseModel):
    model_config = ConfigDict(extra="allow")

    status: str


def make_local_options(temperature: float, max_tokens: int) -> dict[str, Any]:
    return {"temperature": temperature, "num_predict": max_tokens}
