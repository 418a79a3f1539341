"""Interactive console loop."""

from __future__ import annotations

from collections.abc import Callable

from loguru import logger

from tutor.core.assistant import Assistant, AssistantOutcome
from tutor.core.types import ExecuteIntent, ExplainIntent, IntentError, SmartResponse
from tutor.gemini.client import GeminiClient

from .render import Renderer

EXIT_WORDS = frozenset({"exit", "quit"})
CLEAR_WORD = "clear"


def show_intent(intent: SmartResponse, renderer: Renderer) -> None:
    if isinstance(intent, ExecuteIntent):
        if intent.explanation:
            renderer.suggestion(intent.explanation)
        return
    if isinstance(intent, ExplainIntent):
        renderer.suggestion(intent.text)
        return
    renderer.error(intent.message)


def run_smart_query(query: str, assistant: Assistant, renderer: Renderer) -> AssistantOutcome:
    """Classify one request, show it, and run it when it is a command."""
    outcome = assistant.handle(query, on_intent=lambda intent: show_intent(intent, renderer))
    if outcome.aborted:
        renderer.info("Aborted.\n")
    elif outcome.execution is not None:
        renderer.newline()
    return outcome


def run_console(
    client: GeminiClient,
    assistant: Assistant,
    renderer: Renderer,
    read_line: Callable[[], str] | None = None,
) -> None:
    read = read_line or renderer.get_user_input
    session_name = client.session.name if client.session is not None else ""
    renderer.welcome(session_name)

    while True:
        try:
            line = read().strip()
        except (KeyboardInterrupt, EOFError):
            renderer.info("Goodbye!")
            break
        if not line:
            continue
        if line in EXIT_WORDS:
            renderer.info("Goodbye!")
            break
        if line == CLEAR_WORD:
            if client.session is not None:
                client.session.clear()
            renderer.info("Session cleared.")
            continue

        outcome = run_smart_query(line, assistant, renderer)
        if isinstance(outcome.intent, IntentError):
            logger.info("console.query.failed kind={}", outcome.intent.kind)
