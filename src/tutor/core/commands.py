"""Question detection for free-form requests."""

from __future__ import annotations

QUESTION_WORDS: tuple[str, ...] = (
    "como",
    "what",
    "how",
    "why",
    "quando",
    "where",
    "qual",
    "quais",
    "o que",
    "por que",
    "porque",
    "explain",
    "explique",
)
INTENT_PREFIXES: tuple[str, ...] = (
    "como eu ",
    "como posso ",
    "how do i ",
    "how can i ",
    "o que faz ",
    "what does ",
    "me explica ",
    "explain ",
)


def is_question(text: str) -> bool:
    lowered = text.lower()
    if "?" in lowered:
        return True
    return any(lowered.startswith(word) or f" {word}" in lowered for word in QUESTION_WORDS)


def extract_intent(question: str) -> str:
    """Strip trailing punctuation and a leading question phrase."""

    intent = question.strip().rstrip("?.")
    lowered = intent.lower()
    for prefix in INTENT_PREFIXES:
        if lowered.startswith(prefix):
            return intent[len(prefix) :]
    return intent


def task_from_request(text: str) -> str:
    """Reduce a request to the task it asks about."""
    return extract_intent(text) if is_question(text) else text.strip()
