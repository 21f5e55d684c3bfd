import pytest

from legal_gateway.classifier import KeywordClassifier


@pytest.fixture
def classifier() -> KeywordClassifier:
    return KeywordClassifier()


@pytest.mark.parametrize("text", ["hi", "Hello!", "hey there", "Good morning", "  howdy, how are you?"])
def test_short_greetings(classifier, text):
    c = classifier.classify(text)
    assert c.is_greeting is True
    assert c.is_legal_query is False


@pytest.mark.parametrize(
    "text",
    [
        "high court ruling",
        "hi, I need help understanding something that happened at my job yesterday",
        "hi, can I sue my landlord?",
        "thanks",
    ],
)
def test_not_greetings(classifier, text):
    assert classifier.classify(text).is_greeting is False


@pytest.mark.parametrize(
    "text",
    [
        "My landlord won't return my security deposit",
        "Can I be fired for posting on social media?",
        "How does child support work?",
        "Do I need a lawyer for small claims?",
    ],
)
def test_legal_queries(classifier, text):
    assert classifier.classify(text).is_legal_query is True


def test_general_messages_are_not_legal(classifier):
    assert classifier.classify("What's a good recipe for lasagna?").is_legal_query is False
    assert classifier.classify("I will be late").is_legal_query is False


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Eviction rules in west virginia?", "West Virginia"),
        ("Is this legal in Virginia?", "Virginia"),
        ("tenant rights in the UK", "United Kingdom"),
        ("Divorce law in Indiana", "Indiana"),
        ("Visa rules for India", "India"),
        ("What are my rights?", None),
    ],
)
def test_jurisdiction_extraction(classifier, text, expected):
    assert classifier.classify(text).jurisdiction == expected
