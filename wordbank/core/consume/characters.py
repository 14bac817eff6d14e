"""Character counting for billing.

Callers that only know token usage convert it to characters with an
empirical per-language ratio.
"""

import math
import re
from collections.abc import Iterable, Mapping
from enum import StrEnum
from typing import Any

_CJK = re.compile(r"[\u4e00-\u9fa5]")
_LATIN = re.compile(r"[a-zA-Z]")


class LanguageType(StrEnum):
    CHINESE = "zh"
    ENGLISH = "en"
    MIXED = "mixed"


# Characters per token
CHARS_PER_TOKEN: dict[LanguageType, float] = {
    LanguageType.CHINESE: 1.5,
    LanguageType.ENGLISH: 4.0,
    LanguageType.MIXED: 2.5,
}


def token_to_chars(tokens: int, language: LanguageType = LanguageType.MIXED) -> int:
    return math.ceil(tokens * CHARS_PER_TOKEN[language])


def detect_language(text: str) -> LanguageType:
    """Classify text by its share of CJK ideographs among CJK + Latin letters."""
    chinese = len(_CJK.findall(text))
    english = len(_LATIN.findall(text))
    total = chinese + english
    if total == 0:
        return LanguageType.MIXED

    ratio = chinese / total
    if ratio > 0.7:
        return LanguageType.CHINESE
    if ratio < 0.3:
        return LanguageType.ENGLISH
    return LanguageType.MIXED


def count_chars(text: str | None) -> int:
    if not text:
        return 0
    return len(text)


def count_message_chars(messages: Iterable[Mapping[str, Any]]) -> int:
    """
    Total characters over chat messages.

    ``content`` may be a string or a list of multimodal parts; only
    ``{"type": "text", "text": ...}`` parts count.
    """
    total = 0
    for message in messages:
        content = message.get("content")
        if isinstance(content, str):
            total += count_chars(content)
        elif isinstance(content, list):
            for part in content:
                if isinstance(part, Mapping) and part.get("type") == "text" and part.get("text"):
                    total += count_chars(part["text"])
    return total


def estimate_tokens(text: str) -> int:
    """Rough token count of ``text`` from its length and detected language."""
    return math.ceil(count_chars(text) / CHARS_PER_TOKEN[detect_language(text)])
