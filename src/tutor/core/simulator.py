"""'What if' prediction of a command's effects."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .safety import is_dangerous

if TYPE_CHECKING:
    from tutor.gemini.client import GeminiClient

FILES_FIELD = "FILES_AFFECTED:"
HIGH_DESTRUCTIVENESS = "DESTRUCTIVENESS: HIGH"
NO_FILES = {"none", "n/a", "-"}


@dataclass
class SimulationResult:
    predicted_output: str = ""
    files_affected: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    is_destructive: bool = False


def static_warnings(command: str) -> list[str]:
    warnings: list[str] = []
    if "rm" in command:
        if "-r" in command:
            warnings.append("This command removes files/directories recursively.")
        if "*" in command:
            warnings.append("The wildcard (*) may match more files than expected.")
    if "chmod" in command and "777" in command:
        warnings.append("chmod 777 removes every permission restriction from the file.")
    return warnings


def parse_prediction(text: str, result: SimulationResult) -> None:
    for line in text.splitlines():
        if FILES_FIELD in line:
            _, _, files = line.partition(":")
            for item in files.split(","):
                name = item.strip()
                if name and name.lower() not in NO_FILES:
                    result.files_affected.append(name)
        if HIGH_DESTRUCTIVENESS in line.upper():
            result.is_destructive = True


class Simulator:
    """Combines the static danger rules with a model prediction."""

    def __init__(self, client: GeminiClient) -> None:
        self._client = client

    def simulate(self, command: str, context: str = "") -> SimulationResult:
        result = SimulationResult(is_destructive=is_dangerous(command))
        if result.is_destructive:
            result.warnings.append("WARNING: this command is potentially destructive!")
        result.warnings.extend(static_warnings(command))

        response = self._client.simulate_command(command, context)
        if not response.ok:
            result.predicted_output = f"Error simulating command: {response.error}"
            return result
        result.predicted_output = response.content
        parse_prediction(response.content, result)
        return result
