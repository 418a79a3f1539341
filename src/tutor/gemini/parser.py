"""Response body parsing for blocking Gemini calls."""

from __future__ import annotations

import json

from tutor.errors import ApiStatusError, ResponseParseError, ResponseStructureError

HTTP_OK = 200


def candidate_text(payload: object) -> str | None:
    """Return ``candidates[0].content.parts[0].text`` or None when absent."""
    if not isinstance(payload, dict):
        return None
    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None
    first = candidates[0]
    if not isinstance(first, dict):
        return None
    content = first.get("content")
    if not isinstance(content, dict):
        return None
    parts = content.get("parts")
    if not isinstance(parts, list) or not parts:
        return None
    part = parts[0]
    if not isinstance(part, dict):
        return None
    text = part.get("text")
    return text if isinstance(text, str) else None


def service_error_message(body: str | bytes) -> str | None:
    """Pull the service's own ``error.message`` out of an error body."""
    try:
        payload = json.loads(body)
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if not isinstance(error, dict):
        return None
    message = error.get("message")
    return message if isinstance(message, str) and message else None


def check_status(status: int, body: str | bytes) -> None:
    if status != HTTP_OK:
        raise ApiStatusError(status, service_error_message(body))


def extract_text(body: str | bytes) -> str:
    """Extract the first candidate's first text part from a complete body.

    Raises:
        ResponseParseError: The body is not JSON.
        ResponseStructureError: The JSON lacks the candidate text path.
    """
    try:
        payload = json.loads(body)
    except ValueError as exc:
        raise ResponseParseError(exc) from exc
    text = candidate_text(payload)
    if text is None:
        raise ResponseStructureError()
    return text


def extract_total_tokens(body: str | bytes) -> int | None:
    try:
        payload = json.loads(body)
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    total = payload.get("totalTokens")
    if isinstance(total, bool) or not isinstance(total, int) or total < 0:
        return None
    return total
