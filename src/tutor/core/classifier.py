"""Classification of model output into execute/explain intents.

The model is asked for exactly one JSON object, but replies often arrive
wrapped in prose or markdown fences. The object is recovered with a plain
positional heuristic: everything from the first ``{`` to the last ``}``. When
unrelated braces surround the payload the substring fails to parse, and that
case lands in the same safe fallback as any other unparseable reply: the whole
text is shown as an explanation and never executed.
"""

from __future__ import annotations

import json

from loguru import logger

from .types import ExecuteIntent, ExplainIntent, IntentError, SmartResponse

EXECUTE = "execute"
EXPLAIN = "explain"


def extract_json_object(text: str) -> str | None:
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end <= start:
        return None
    return text[start : end + 1]


def fallback_explain(text: str) -> ExplainIntent:
    return ExplainIntent(text=text, fallback=True)


def classify(text: str) -> SmartResponse:
    candidate = extract_json_object(text)
    if candidate is None:
        logger.debug("classifier.fallback reason=no-object")
        return fallback_explain(text)
    try:
        payload = json.loads(candidate)
    except ValueError:
        logger.debug("classifier.fallback reason=invalid-json")
        return fallback_explain(text)
    if not isinstance(payload, dict) or "type" not in payload:
        logger.debug("classifier.fallback reason=no-type")
        return fallback_explain(text)

    kind = payload["type"]
    if kind == EXECUTE:
        return _execute_intent(payload)
    if kind == EXPLAIN:
        return _explain_intent(payload)
    logger.warning("classifier.unknown_type type={!r}", kind)
    return IntentError(f"Unknown response type: {kind}")


def _execute_intent(payload: dict[str, object]) -> SmartResponse:
    command = payload.get("command")
    if not isinstance(command, str) or not command.strip():
        return IntentError("Execute response is missing a command")
    explanation = payload.get("explanation")
    return ExecuteIntent(
        command=command.strip(),
        explanation=explanation if isinstance(explanation, str) else "",
    )


def _explain_intent(payload: dict[str, object]) -> SmartResponse:
    for key in ("response", "explanation"):
        value = payload.get(key)
        if isinstance(value, str):
            return ExplainIntent(text=value)
    return IntentError("Explain response is missing its text")
