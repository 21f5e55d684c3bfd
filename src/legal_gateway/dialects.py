from __future__ import annotations

from enum import Enum


class Dialect(str, Enum):
    CHAT_COMPLETIONS = "chat-completions"
    RAW_GENERATION = "raw-generation"
