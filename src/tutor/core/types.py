"""Shared core dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias


@dataclass(frozen=True)
class ExecuteIntent:
    """The model proposes a shell command to run."""

    command: str
    explanation: str = ""

    def __post_init__(self) -> None:
        if not self.command.strip():
            raise ValueError("execute intent requires a command")


@dataclass(frozen=True)
class ExplainIntent:
    """The model answers in prose; nothing is executed.

    ``fallback`` marks answers that could not be parsed as the JSON protocol
    and were kept verbatim instead.
    """

    text: str
    fallback: bool = False


@dataclass(frozen=True)
class IntentError:
    """The call failed or the model violated the response protocol."""

    message: str
    kind: str = "classification"


SmartResponse: TypeAlias = ExecuteIntent | ExplainIntent | IntentError
