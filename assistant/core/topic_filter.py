from __future__ import annotations

from typing import Iterable, List

from assistant.core.knowledge import KEYWORDS, QUESTIONS


def is_in_scope(text: str, keywords: Iterable[str] = KEYWORDS) -> bool:
    """True when any keyword occurs as a substring of the lower-cased text.

    Plain substring matching: "wealth and health" is in scope, and so is any
    unrelated sentence that happens to mention "diet".
    """
    lowered = (text or "").lower()
    return any(keyword in lowered for keyword in keywords)


def check_questions_in_scope(keywords: Iterable[str] = KEYWORDS) -> None:
    """Raise ``ValueError`` if a canned question would be refused by the filter."""
    rejected: List[str] = [
        entry.question for entry in QUESTIONS if not is_in_scope(entry.question, keywords)
    ]
    if rejected:
        raise ValueError(f"Canned questions outside the topic filter: {rejected}")
