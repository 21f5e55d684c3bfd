from __future__ import annotations

from collections.abc import Sequence

from .contracts import CompletionOptions, Message

LEGAL_OPTIONS = CompletionOptions(temperature=0.3, max_output_tokens=2000)
CHAT_OPTIONS = CompletionOptions(temperature=0.7, max_output_tokens=1500)

# Number of prior turns forwarded with a general chat message.
HISTORY_WINDOW = 6

DEFAULT_CONTEXT = "General legal inquiry"


def build_legal_system_prompt(jurisdiction: str, context: str | None = None) -> str:
    return f"""You are a legal information assistant specializing in {jurisdiction} law.

Provide comprehensive legal guidance that includes:

**Response Structure:**
1. **Legal Framework** - Cite relevant laws, statutes, and regulations from {jurisdiction}
2. **Key Rights & Obligations** - Explain what the law says about the situation
3. **Practical Steps** - Provide actionable next steps
4. **Important Deadlines** - Mention any time-sensitive requirements
5. **Professional Guidance** - When to consult with a qualified attorney

**Formatting Guidelines:**
- Use clear headings with **bold text**
- Include bullet points for lists
- Cite specific statutes and regulations where applicable
- Provide practical, actionable advice

**Context:** {context or DEFAULT_CONTEXT}
**Jurisdiction:** {jurisdiction}

**Important:** Always include a disclaimer that this is general legal information only and not legal advice. For specific legal matters, recommend consulting with a qualified attorney in {jurisdiction}."""


def build_legal_user_prompt(question: str, jurisdiction: str) -> str:
    return f"""Legal Question for {jurisdiction}:

{question}

Please provide detailed legal guidance specific to {jurisdiction} law, including relevant statutes, practical next steps, and when professional legal counsel should be sought."""


def build_legal_messages(question: str, jurisdiction: str, context: str | None = None) -> list[Message]:
    return [
        Message(role="system", content=build_legal_system_prompt(jurisdiction, context)),
        Message(role="user", content=build_legal_user_prompt(question, jurisdiction)),
    ]


def build_chat_messages(
    message: str,
    system_prompt: str,
    history: Sequence[Message] = (),
) -> list[Message]:
    recent = [m for m in history if m.role in ("user", "assistant")][-HISTORY_WINDOW:]
    return [Message(role="system", content=system_prompt), *recent, Message(role="user", content=message)]


def build_clarifying_response(question: str, questions: Sequence[str]) -> str:
    numbered = "\n".join(f"{i}. {q}" for i, q in enumerate(questions, start=1))
    return f"""To provide accurate legal guidance, I need additional information about your situation.

**Your Question**: {question}

**Please provide the following details**:

{numbered}

**Why This Information Matters**: Legal rules differ between jurisdictions. These details let me give you guidance with the right statutes and next steps."""


def build_local_legal_system_prompt(jurisdiction: str, context: str | None = None) -> str:
    """Shorter structure for local models, which follow long instructions less reliably."""
    return f"""You are a legal information assistant specializing in {jurisdiction} law.

Provide comprehensive legal guidance that includes:
1. **Statutory References** - Cite relevant laws and acts from {jurisdiction}
2. **Case Law Examples** - Share illustrative legal examples when applicable
3. **Action Plan** - Suggest practical, safe next steps
4. **Urgency Alerts** - Mention if urgent action is typically required

Format your response with clear headings and bullet points. Always include a disclaimer that this is general information only and not legal advice.

Context: {context or DEFAULT_CONTEXT}
Jurisdiction: {jurisdiction}"""


def build_local_legal_prompt(question: str, jurisdiction: str) -> str:
    return f"""User's legal question: {question}

Please provide detailed legal guidance specific to {jurisdiction} law."""
