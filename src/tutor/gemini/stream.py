"""Incremental ingestion of server-sent-event responses."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from loguru import logger

from .parser import candidate_text

EVENT_PREFIX = b"data: "
LINE_TERMINATOR = b"\n"

ChunkSink = Callable[[str], None]


@dataclass(frozen=True)
class StreamResult:
    """Outcome of one streaming call.

    ``text`` holds everything delivered to the sink, even when ``error`` is
    set: a failure midway does not retract output already shown.
    """

    text: str
    error: str | None = None
    error_kind: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class StreamAccumulator:
    """Per-call SSE state: pending partial line and accumulated text."""

    def __init__(self, sink: ChunkSink | None = None) -> None:
        self._sink = sink
        self._pending = bytearray()
        self._parts: list[str] = []
        self.events = 0
        self.dropped = 0

    @property
    def text(self) -> str:
        return "".join(self._parts)

    @property
    def pending(self) -> bytes:
        return bytes(self._pending)

    def feed(self, data: bytes) -> list[str]:
        """Consume newly received bytes and return the fragments emitted."""
        self._pending.extend(data)
        emitted: list[str] = []
        while True:
            index = self._pending.find(LINE_TERMINATOR)
            if index < 0:
                break
            line = bytes(self._pending[:index])
            del self._pending[: index + 1]
            fragment = self._handle_line(line)
            if fragment is not None:
                emitted.append(fragment)
        return emitted

    def close(self) -> list[str]:
        """Flush a final line the server did not terminate."""
        if not self._pending:
            return []
        line = bytes(self._pending)
        self._pending.clear()
        fragment = self._handle_line(line)
        return [fragment] if fragment is not None else []

    def _handle_line(self, line: bytes) -> str | None:
        if line.endswith(b"\r"):
            line = line[:-1]
        if not line.startswith(EVENT_PREFIX):
            return None
        self.events += 1
        try:
            event = json.loads(line[len(EVENT_PREFIX) :])
        except ValueError:
            self.dropped += 1
            return None
        fragment = candidate_text(event)
        if fragment is None:
            # Control events (usage metadata, finish reasons) carry no text.
            self.dropped += 1
            return None
        self._parts.append(fragment)
        if self._sink is not None:
            self._sink(fragment)
        return fragment


def consume(chunks: Iterable[bytes], accumulator: StreamAccumulator) -> StreamAccumulator:
    """Drive ``accumulator`` over ``chunks`` until the iterable is exhausted.

    Exceptions raised by the iterable propagate to the caller; the
    accumulator keeps the text already passed to its sink.
    """
    for chunk in chunks:
        if chunk:
            accumulator.feed(chunk)
    accumulator.close()
    logger.debug("gemini.stream.done events={} dropped={}", accumulator.events, accumulator.dropped)
    return accumulator
