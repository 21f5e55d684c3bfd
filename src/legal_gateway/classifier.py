from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class Classification:
    is_greeting: bool
    is_legal_query: bool
    jurisdiction: str | None = None


class QueryClassifier(Protocol):
    def classify(self, text: str) -> Classification: ...


GREETING_PHRASES: tuple[str, ...] = (
    "hi",
    "hello",
    "hey",
    "hiya",
    "howdy",
    "greetings",
    "good morning",
    "good afternoon",
    "good evening",
    "good day",
    "what's up",
    "whats up",
)

LEGAL_KEYWORDS: tuple[str, ...] = (
    "law",
    "laws",
    "legal",
    "illegal",
    "lawyer",
    "attorney",
    "court",
    "judge",
    "sue",
    "suing",
    "sued",
    "lawsuit",
    "contract",
    "lease",
    "landlord",
    "tenant",
    "evict",
    "eviction",
    "divorce",
    "custody",
    "alimony",
    "child support",
    "rights",
    "statute",
    "regulation",
    "liability",
    "liable",
    "negligence",
    "damages",
    "settlement",
    "fired",
    "wrongful termination",
    "discrimination",
    "harassment",
    "overtime",
    "wage",
    "wages",
    "visa",
    "immigration",
    "citizenship",
    "last will",
    "estate",
    "inheritance",
    "probate",
    "copyright",
    "patent",
    "trademark",
    "arrest",
    "arrested",
    "criminal",
    "police",
    "bail",
    "dui",
    "small claims",
    "bankruptcy",
    "debt collector",
    "deposit",
)

US_STATES: tuple[str, ...] = (
    "Alabama", "Alaska", "Arizona", "Arkansas", "California", "Colorado", "Connecticut", "Delaware",
    "Florida", "Georgia", "Hawaii", "Idaho", "Illinois", "Indiana", "Iowa", "Kansas", "Kentucky",
    "Louisiana", "Maine", "Maryland", "Massachusetts", "Michigan", "Minnesota", "Mississippi",
    "Missouri", "Montana", "Nebraska", "Nevada", "New Hampshire", "New Jersey", "New Mexico",
    "New York", "North Carolina", "North Dakota", "Ohio", "Oklahoma", "Oregon", "Pennsylvania",
    "Rhode Island", "South Carolina", "South Dakota", "Tennessee", "Texas", "Utah", "Vermont",
    "Virginia", "Washington", "West Virginia", "Wisconsin", "Wyoming", "District of Columbia",
)

# alias -> canonical name
COUNTRY_ALIASES: dict[str, str] = {
    "united states": "United States",
    "usa": "United States",
    "united kingdom": "United Kingdom",
    "uk": "United Kingdom",
    "england": "United Kingdom",
    "scotland": "United Kingdom",
    "wales": "United Kingdom",
    "canada": "Canada",
    "australia": "Australia",
    "new zealand": "New Zealand",
    "ireland": "Ireland",
    "india": "India",
    "germany": "Germany",
    "france": "France",
    "south africa": "South Africa",
}


def _alternation(words: list[str]) -> str:
    # Longest first so "West Virginia" wins over "Virginia".
    return "|".join(re.escape(w) for w in sorted(words, key=len, reverse=True))


class KeywordClassifier:
    """
    Literal-pattern classifier.

    A greeting is a short message that opens with a greeting phrase; longer
    messages, or short ones mentioning a legal topic ("hi, can I sue?"), are
    not greetings.
    """

    def __init__(self, *, max_greeting_words: int = 6):
        self.max_greeting_words = max_greeting_words
        self._greeting_re = re.compile(
            rf"^\s*(?:{_alternation(list(GREETING_PHRASES))})\b",
            re.IGNORECASE,
        )
        self._legal_re = re.compile(rf"\b(?:{_alternation(list(LEGAL_KEYWORDS))})\b", re.IGNORECASE)
        canonical = {s.lower(): s for s in US_STATES}
        canonical.update(COUNTRY_ALIASES)
        self._jurisdictions = canonical
        self._jurisdiction_re = re.compile(rf"\b(?:{_alternation(list(canonical))})\b", re.IGNORECASE)

    def is_greeting(self, text: str) -> bool:
        words = text.split()
        if not words or len(words) > self.max_greeting_words:
            return False
        return bool(self._greeting_re.match(text))

    def is_legal_query(self, text: str) -> bool:
        return bool(self._legal_re.search(text))

    def extract_jurisdiction(self, text: str) -> str | None:
        match = self._jurisdiction_re.search(text)
        if match is None:
            return None
        return self._jurisdictions[match.group(0).lower()]

    def classify(self, text: str) -> Classification:
        legal = self.is_legal_query(text)
        return Classification(
            is_greeting=self.is_greeting(text) and not legal,
            is_legal_query=legal,
            jurisdiction=self.extract_jurisdiction(text),
        )
