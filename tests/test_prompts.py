from legal_gateway.contracts import Message
from legal_gateway.prompts import (
    CHAT_OPTIONS,
    HISTORY_WINDOW,
    LEGAL_OPTIONS,
    build_chat_messages,
    build_clarifying_response,
    build_legal_messages,
    build_legal_system_prompt,
    build_legal_user_prompt,
    build_local_legal_prompt,
    build_local_legal_system_prompt,
)


def test_legal_system_prompt_has_headings_jurisdiction_and_disclaimer():
    prompt = build_legal_system_prompt("California")
    for heading in (
        "Legal Framework",
        "Key Rights & Obligations",
        "Practical Steps",
        "Important Deadlines",
        "Professional Guidance",
    ):
        assert heading in prompt
    assert "specializing in California law" in prompt
    assert "not legal advice" in prompt
    assert "qualified attorney in California" in prompt
    assert "General legal inquiry" in prompt


def test_legal_system_prompt_uses_context():
    assert "**Context:** Tenant rights page" in build_legal_system_prompt("Texas", "Tenant rights page")


def test_legal_user_prompt_restates_question_and_jurisdiction():
    prompt = build_legal_user_prompt("Can my landlord keep my deposit?", "Ontario")
    assert prompt.startswith("Legal Question for Ontario:")
    assert "Can my landlord keep my deposit?" in prompt
    assert "specific to Ontario law" in prompt


def test_legal_messages_are_system_then_user():
    messages = build_legal_messages("q", "Texas")
    assert [m.role for m in messages] == ["system", "user"]


def test_chat_messages_keep_recent_history_window():
    history = [Message(role="user" if i % 2 == 0 else "assistant", content=str(i)) for i in range(10)]
    messages = build_chat_messages("new", "sys", history)
    assert messages[0] == Message(role="system", content="sys")
    assert messages[-1] == Message(role="user", content="new")
    assert [m.content for m in messages[1:-1]] == [str(i) for i in range(10 - HISTORY_WINDOW, 10)]


def test_option_presets():
    assert (LEGAL_OPTIONS.temperature, LEGAL_OPTIONS.max_output_tokens) == (0.3, 2000)
    assert (CHAT_OPTIONS.temperature, CHAT_OPTIONS.max_output_tokens) == (0.7, 1500)


def test_clarifying_response_numbers_questions():
    text = build_clarifying_response("Can I sue?", ["Where?", "When?"])
    assert "**Your Question**: Can I sue?" in text
    assert "1. Where?\n2. When?" in text


def test_local_legal_prompts_use_shorter_structure():
    system = build_local_legal_system_prompt("Oregon")
    for heading in ("Statutory References", "Case Law Examples", "Action Plan", "Urgency Alerts"):
        assert heading in system
    assert "Context: General legal inquiry" in system
    assert "Jurisdiction: Oregon" in system
    assert "not legal advice" in system
    assert build_local_legal_prompt("Q?", "Oregon") == (
        "User's legal question: Q?\n\nPlease provide detailed legal guidance specific to Oregon law."
    )
