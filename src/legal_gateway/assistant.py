from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

import structlog

from .classifier import KeywordClassifier, QueryClassifier
from .contracts import CompletionBackend, LegalCompletionBackend, Message
from .errors import ConfigurationError
from .prompts import (
    CHAT_OPTIONS,
    LEGAL_OPTIONS,
    build_chat_messages,
    build_clarifying_response,
    build_legal_messages,
)

log = structlog.get_logger()

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful legal information assistant. Answer clearly and concisely, "
    "point out when a question depends on the user's jurisdiction, and remind the user "
    "that you provide general information, not legal advice."
)

GREETING_RESPONSE = (
    "Hello! I'm your legal information assistant. Tell me what's going on and which state "
    "or country you're in, and I'll walk you through the relevant laws, your rights and "
    "practical next steps.\n\n"
    "*This is general legal information, not legal advice.*"
)

JURISDICTION_QUESTIONS: tuple[str, ...] = (
    "Which state or country does this situation take place in?",
    "When did the events happen, and have any deadlines or notices already been given?",
)


class ReplyKind(str, Enum):
    GREETING = "greeting"
    LEGAL = "legal"
    CLARIFICATION = "clarification"
    GENERAL = "general"


@dataclass(frozen=True)
class AssistantReply:
    content: str
    kind: ReplyKind
    jurisdiction: str | None = None


class LegalAssistant:
    """
    Routes one user message: canned greeting, structured legal answer,
    clarifying questions, or general chat with recent history.

    Backends that implement `complete_legal` build their own legal prompt;
    others get the structured chat prompt. Backend errors propagate unchanged
    so callers can branch on `kind`.
    """

    def __init__(
        self,
        backend: CompletionBackend,
        classifier: QueryClassifier | None = None,
        *,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    ):
        self.backend = backend
        self.classifier = classifier or KeywordClassifier()
        self.system_prompt = system_prompt

    async def respond(
        self,
        message: str,
        *,
        jurisdiction: str | None = None,
        context: str | None = None,
        history: Sequence[Message] = (),
    ) -> AssistantReply:
        text = message.strip()
        if not text:
            raise ConfigurationError("Message must not be empty.")

        c = self.classifier.classify(text)
        if c.is_greeting:
            log.info("assistant_reply", kind=ReplyKind.GREETING.value)
            return AssistantReply(content=GREETING_RESPONSE, kind=ReplyKind.GREETING)

        if c.is_legal_query:
            resolved = c.jurisdiction or jurisdiction
            if not resolved:
                log.info("assistant_reply", kind=ReplyKind.CLARIFICATION.value)
                return AssistantReply(
                    content=build_clarifying_response(text, JURISDICTION_QUESTIONS),
                    kind=ReplyKind.CLARIFICATION,
                )
            if isinstance(self.backend, LegalCompletionBackend):
                result = await self.backend.complete_legal(text, resolved, context)
            else:
                result = await self.backend.complete(build_legal_messages(text, resolved, context), LEGAL_OPTIONS)
            log.info("assistant_reply", kind=ReplyKind.LEGAL.value, jurisdiction=resolved, provider=result.provider_id)
            return AssistantReply(content=result.text, kind=ReplyKind.LEGAL, jurisdiction=resolved)

        result = await self.backend.complete(build_chat_messages(text, self.system_prompt, history), CHAT_OPTIONS)
        log.info("assistant_reply", kind=ReplyKind.GENERAL.value, provider=result.provider_id)
        return AssistantReply(content=result.text, kind=ReplyKind.GENERAL, jurisdiction=jurisdiction)
