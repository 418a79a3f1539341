"""Smart-query orchestration: classify, vet, confirm, execute, record."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from loguru import logger

from .executor import ExecutionResult
from .safety import danger_reasons
from .types import ExecuteIntent, SmartResponse

if TYPE_CHECKING:
    from tutor.gemini.client import GeminiClient
    from tutor.gemini.stream import ChunkSink

ConfirmDangerous = Callable[[str, list[str]], bool]
Execute = Callable[[str], ExecutionResult]
IntentHook = Callable[[SmartResponse], None]


@dataclass(frozen=True)
class AssistantOutcome:
    """What happened to one smart query."""

    intent: SmartResponse
    dangers: list[str] = field(default_factory=list)
    aborted: bool = False
    execution: ExecutionResult | None = None

    @property
    def executed(self) -> bool:
        return self.execution is not None


class Assistant:
    """Turns a request into an intent and runs vetted commands.

    Dangerous commands reach ``execute`` only when ``confirm`` approves them;
    safe commands run without a prompt. Captured output is recorded into the
    client's session, which ignores it for anonymous sessions.
    """

    def __init__(self, client: GeminiClient, *, confirm: ConfirmDangerous, execute: Execute) -> None:
        self._client = client
        self._confirm = confirm
        self._execute = execute

    def handle(
        self,
        query: str,
        *,
        sink: ChunkSink | None = None,
        on_intent: IntentHook | None = None,
    ) -> AssistantOutcome:
        """Classify ``query`` and run the command it yields.

        ``on_intent`` sees the classified intent before anything is executed.
        """
        if sink is None:
            intent = self._client.smart_query(query)
        else:
            intent = self._client.smart_query_streaming(query, sink)
        if on_intent is not None:
            on_intent(intent)
        if not isinstance(intent, ExecuteIntent):
            return AssistantOutcome(intent=intent)
        return self.run_intent(intent)

    def run_intent(self, intent: ExecuteIntent) -> AssistantOutcome:
        command = intent.command
        dangers = danger_reasons(command)
        if dangers:
            logger.info("assistant.dangerous command={!r} reasons={}", command, dangers)
            if not self._confirm(command, dangers):
                logger.info("assistant.aborted command={!r}", command)
                return AssistantOutcome(intent=intent, dangers=dangers, aborted=True)
        result = self._execute(command)
        self._client.add_command_output(command, result.output)
        return AssistantOutcome(intent=intent, dangers=dangers, execution=result)
