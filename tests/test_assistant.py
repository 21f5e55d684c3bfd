from collections.abc import Sequence

import pytest

from legal_gateway.assistant import GREETING_RESPONSE, LegalAssistant, ReplyKind
from legal_gateway.classifier import Classification
from legal_gateway.contracts import CompletionOptions, CompletionResult, Message
from legal_gateway.errors import ConfigurationError, ErrorKind, RequestTimeoutError
from legal_gateway.prompts import CHAT_OPTIONS, LEGAL_OPTIONS


class FakeBackend:
    def __init__(self, text: str = "answer", error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls: list[tuple[list[Message], CompletionOptions | None]] = []

    async def complete(
        self,
        messages: Sequence[Message],
        options: CompletionOptions | None = None,
    ) -> CompletionResult:
        self.calls.append((list(messages), options))
        if self.error is not None:
            raise self.error
        return CompletionResult(text=self.text, provider_id="fake", model="fake-1")


@pytest.mark.asyncio
async def test_greeting_is_answered_without_backend():
    backend = FakeBackend()
    reply = await LegalAssistant(backend).respond("Hello!")
    assert reply.kind is ReplyKind.GREETING
    assert reply.content == GREETING_RESPONSE
    assert backend.calls == []


@pytest.mark.asyncio
async def test_legal_query_uses_jurisdiction_from_text():
    backend = FakeBackend(text="**Legal Framework** ...")
    reply = await LegalAssistant(backend).respond("Can my landlord keep my deposit in Texas?", context="Rentals")
    assert reply.kind is ReplyKind.LEGAL
    assert reply.jurisdiction == "Texas"
    assert reply.content == "**Legal Framework** ..."

    messages, options = backend.calls[0]
    assert options == LEGAL_OPTIONS
    assert [m.role for m in messages] == ["system", "user"]
    assert "specializing in Texas law" in messages[0].content
    assert "**Context:** Rentals" in messages[0].content


@pytest.mark.asyncio
async def test_legal_query_falls_back_to_supplied_jurisdiction():
    backend = FakeBackend()
    reply = await LegalAssistant(backend).respond("Can I be fired for this?", jurisdiction="Ontario")
    assert reply.jurisdiction == "Ontario"
    assert "Legal Question for Ontario" in backend.calls[0][0][1].content


@pytest.mark.asyncio
async def test_legal_query_without_jurisdiction_asks_for_it():
    backend = FakeBackend()
    reply = await LegalAssistant(backend).respond("Can I sue my employer?")
    assert reply.kind is ReplyKind.CLARIFICATION
    assert "Which state or country" in reply.content
    assert backend.calls == []


@pytest.mark.asyncio
async def test_general_message_sends_system_prompt_and_recent_history():
    backend = FakeBackend(text="Sure.")
    history = [Message(role="user", content="earlier"), Message(role="assistant", content="reply")]
    assistant = LegalAssistant(backend, system_prompt="sys")
    reply = await assistant.respond("Tell me a joke", history=history)
    assert reply.kind is ReplyKind.GENERAL
    assert reply.content == "Sure."

    messages, options = backend.calls[0]
    assert options == CHAT_OPTIONS
    assert [m.content for m in messages] == ["sys", "earlier", "reply", "Tell me a joke"]


@pytest.mark.asyncio
async def test_blank_message_is_rejected():
    with pytest.raises(ConfigurationError):
        await LegalAssistant(FakeBackend()).respond("   ")


@pytest.mark.asyncio
async def test_backend_errors_propagate_with_kind():
    backend = FakeBackend(error=RequestTimeoutError("Groq", 30))
    with pytest.raises(RequestTimeoutError) as exc:
        await LegalAssistant(backend).respond("What is a lease in Ohio?")
    assert exc.value.kind is ErrorKind.TIMEOUT


@pytest.mark.asyncio
async def test_classifier_is_pluggable():
    class AlwaysLegal:
        def classify(self, text: str) -> Classification:
            return Classification(is_greeting=False, is_legal_query=True, jurisdiction="Mars")

    backend = FakeBackend()
    reply = await LegalAssistant(backend, AlwaysLegal()).respond("hi")
    assert reply.kind is ReplyKind.LEGAL
    assert reply.jurisdiction == "Mars"


@pytest.mark.asyncio
async def test_backend_with_own_legal_prompt_gets_question_directly():
    class LocalStyleBackend(FakeBackend):
        def __init__(self):
            super().__init__()
            self.legal_calls: list[tuple[str, str, str | None]] = []

        async def complete_legal(self, question: str, jurisdiction: str, context: str | None = None):
            self.legal_calls.append((question, jurisdiction, context))
            return CompletionResult(text="local legal", provider_id="ollama", model="llama3.2")

    backend = LocalStyleBackend()
    reply = await LegalAssistant(backend).respond("Is my lease legal in Oregon?", context="Rentals")
    assert reply.kind is ReplyKind.LEGAL
    assert reply.content == "local legal"
    assert backend.legal_calls == [("Is my lease legal in Oregon?", "Oregon", "Rentals")]
    assert backend.calls == []

    general = await LegalAssistant(backend).respond("Tell me a joke")
    assert general.kind is ReplyKind.GENERAL
    assert len(backend.calls) == 1
