"""Request payloads and prompt templates for the Gemini service."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from tutor.session.store import Turn

PLAIN_TEXT_DIRECTIVE = "CRITICAL: Respond in plain text only. No markdown, no formatting."
VALIDATION_PROMPT = "Respond with only the word OK"

_LANGUAGE_NAMES = {
    "en-us": "English",
    "en": "English",
    "pt-br": "Portuguese (Brazilian)",
    "pt": "Portuguese (Brazilian)",
    "es": "Spanish",
    "es-es": "Spanish",
}


def language_instruction(language: str) -> str:
    name = _LANGUAGE_NAMES.get(language.strip().lower(), language)
    return f"Respond in {name}."


def build_contents(history: Sequence[Turn], prompt: str) -> list[dict[str, Any]]:
    """Return ``[...history, user turn]`` without touching ``history``."""
    contents = [turn.to_payload() for turn in history]
    contents.append(Turn("user", prompt).to_payload())
    return contents


def build_request(history: Sequence[Turn], prompt: str) -> dict[str, Any]:
    return {"contents": build_contents(history, prompt)}


def build_count_request(history: Sequence[Turn]) -> dict[str, Any]:
    return {"contents": [turn.to_payload() for turn in history]}


def smart_query_prompt(query: str, language: str) -> str:
    return "\n".join(
        [
            f"User request: {query}",
            "",
            "Analyze the request:",
            "1. EXECUTE: If user wants to DO something with the system (find files, list processes, check disk, etc.)",
            "2. EXPLAIN: For greetings, questions about concepts, explanations "
            "(hi, hello, why, what is, how does X work)",
            "",
            "Greetings like 'hi', 'hello', 'ola' are ALWAYS type explain.",
            "Only use execute if the user clearly wants to run a shell command.",
            "",
            "Respond with ONLY valid JSON:",
            'Execute: {"type":"execute","command":"shell command","explanation":"1-line plain text explanation"}',
            'Explain: {"type":"explain","response":"plain text response"}',
            "",
            "CRITICAL: No markdown, no backticks, no asterisks, no formatting. Plain text only.",
            language_instruction(language),
        ]
    )


def plain_prompt(prompt: str, language: str) -> str:
    return f"{prompt}\n\n{language_instruction(language)}\n\n{PLAIN_TEXT_DIRECTIVE}"


def explain_command_prompt(command: str, language: str) -> str:
    return (
        f"Explain this command briefly and directly: {command}\n\n"
        "Format: One short paragraph with what it does, then each flag explained in one line. "
        "No emojis, no bullet points, no headers. Keep it under 100 words. "
        f"{language_instruction(language)}"
    )


def suggest_command_prompt(task: str, language: str) -> str:
    return (
        f"User wants to: {task}\n\n"
        "Give the exact command, then one sentence explaining it. "
        "No emojis, no bullet points. Keep it very short. "
        f"{language_instruction(language)}"
    )


def simulate_prompt(command: str, language: str, context: str = "") -> str:
    lines = [
        "You are a Linux command simulator. Predict what would happen if the following command were executed.",
        "",
        f"Command: {command}",
    ]
    if context:
        lines.append(f"Context: {context}")
    lines.extend(
        [
            "",
            "Answer in this structure:",
            "FILES_AFFECTED: (comma-separated files/directories that would be modified, created or deleted)",
            "EXPECTED_OUTPUT: (what would appear in the terminal)",
            "RISKS: (possible problems or side effects)",
            "DESTRUCTIVENESS: (LOW, MEDIUM, HIGH)",
            "",
            "Keep the field names in English. Be precise and technical. "
            f"{language_instruction(language)}",
        ]
    )
    return "\n".join(lines)
