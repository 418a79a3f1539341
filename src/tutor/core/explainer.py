"""Command explanation in several registers."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from tutor.gemini.payload import language_instruction

if TYPE_CHECKING:
    from tutor.gemini.client import GeminiClient


class ExplainMode(str, Enum):
    NORMAL = "normal"
    ELI5 = "eli5"
    DETAILED = "detailed"


def build_explain_prompt(command: str, mode: ExplainMode, language: str) -> str:
    if mode is ExplainMode.ELI5:
        return (
            "Explain this command to a 5-year-old in 2-3 simple sentences using a real-world analogy "
            "(tidying toys, finding things around the house): "
            f"{command}\n\n"
            "No emojis, no bullet points. Very short and simple. "
            f"{language_instruction(language)}"
        )
    if mode is ExplainMode.DETAILED:
        return "\n".join(
            [
                "You are an advanced Linux instructor. Give a detailed technical explanation.",
                "",
                f"Command: {command}",
                "",
                "Include:",
                "1. Full syntax and every option used",
                "2. Practical usage examples",
                "3. Related commands",
                "4. Common pitfalls and good practice",
                "5. How to combine it with other commands (pipes, redirection)",
                "",
                language_instruction(language),
            ]
        )
    return "\n".join(
        [
            "You are a CLI teaching assistant. Explain the following command clearly.",
            "",
            f"Command: {command}",
            "",
            "Provide:",
            "1. A short summary of what it does",
            "2. What each flag/option does",
            "3. A practical example of when to use it",
            "",
            f"Keep it concise but informative. {language_instruction(language)}",
        ]
    )


class ExplainerEngine:
    """Explains commands and failures through the service client."""

    def __init__(self, client: GeminiClient) -> None:
        self._client = client

    def explain(self, command: str, mode: ExplainMode = ExplainMode.NORMAL) -> str:
        if mode is ExplainMode.NORMAL:
            response = self._client.explain_command(command)
        else:
            response = self._client.generate_content(build_explain_prompt(command, mode, self._client.language))
        if not response.ok:
            return f"Error generating explanation: {response.error}"
        return response.content

    def suggest_fix(self, failed_command: str, error_message: str) -> str:
        prompt = "\n".join(
            [
                "You are a CLI assistant helping to fix a command that failed.",
                "",
                f"Failed command: {failed_command}",
                f"Error message: {error_message}",
                "",
                "Provide:",
                "1. What caused the error",
                "2. The corrected command",
                "3. A short explanation of the fix",
                "",
                f"Be direct and practical. {language_instruction(self._client.language)}",
            ]
        )
        response = self._client.generate_content(prompt)
        if not response.ok:
            return f"Error generating suggestion: {response.error}"
        return response.content

    def translate_question(self, question: str) -> str:
        response = self._client.suggest_command(question)
        if not response.ok:
            return f"Error processing question: {response.error}"
        return response.content
