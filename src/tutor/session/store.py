"""Persistent per-name session store."""

from __future__ import annotations

import json
from collections.abc import Iterable
from contextvars import ContextVar
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal
from urllib.parse import quote, unquote

from loguru import logger

from tutor.utils import ensure_private_dir, write_private_text

SESSION_FILE_SUFFIX = ".json"
DEFAULT_MAX_PAIRS = 10
ROLES = ("user", "model")

Role = Literal["user", "model"]

_session_context: ContextVar[str] = ContextVar("session", default="-")


def current_session() -> str:
    """Get the name of the session active in this context."""
    return _session_context.get()


@dataclass(frozen=True)
class Turn:
    """One role-tagged message of a conversation."""

    role: Role
    text: str

    def to_payload(self) -> dict[str, Any]:
        return {"role": self.role, "parts": [{"text": self.text}]}

    @staticmethod
    def from_payload(payload: object) -> Turn | None:
        if not isinstance(payload, dict):
            return None
        role = payload.get("role")
        parts = payload.get("parts")
        if role not in ROLES:
            return None
        if not isinstance(parts, list) or not parts:
            return None
        first = parts[0]
        if not isinstance(first, dict) or not isinstance(first.get("text"), str):
            return None
        return Turn(role, first["text"])


def session_path(name: str, root: Path) -> Path:
    """Map a session name to exactly one file inside ``root``."""
    return root / f"{quote(name, safe='')}{SESSION_FILE_SUFFIX}"


def list_sessions(root: Path) -> list[str]:
    if not root.is_dir():
        return []
    names = [unquote(path.name.removesuffix(SESSION_FILE_SUFFIX)) for path in root.glob(f"*{SESSION_FILE_SUFFIX}")]
    return sorted(name for name in names if name)


def delete_session(name: str, root: Path) -> bool:
    path = session_path(name, root)
    if not path.is_file():
        return False
    path.unlink()
    logger.info("session.delete name={}", name)
    return True


def trim_turns(turns: list[Turn], max_pairs: int) -> list[Turn]:
    """Drop the oldest turn pairs until at most ``max_pairs`` pairs remain."""
    limit = max_pairs * 2
    if len(turns) <= limit:
        return list(turns)
    excess_pairs = (len(turns) - limit + 1) // 2
    return list(turns[excess_pairs * 2 :])


class SessionStore:
    """Durable conversation history for one named session.

    An empty name means an anonymous session: nothing is read or written and
    appends are ignored. Persistence failures are logged and absorbed; the
    in-memory history keeps working for the rest of the process.
    """

    def __init__(self, name: str, *, root: Path, max_pairs: int = DEFAULT_MAX_PAIRS) -> None:
        self.name = name.strip()
        self.root = root
        self.max_pairs = max_pairs
        self._turns: list[Turn] = []
        if self.name:
            _session_context.set(self.name)

    @property
    def persistent(self) -> bool:
        return bool(self.name)

    @property
    def path(self) -> Path | None:
        if not self.persistent:
            return None
        return session_path(self.name, self.root)

    @property
    def history(self) -> list[Turn]:
        return list(self._turns)

    def __len__(self) -> int:
        return len(self._turns)

    def load(self) -> list[Turn]:
        self._turns = self._read()
        logger.debug("session.load name={} turns={}", self.name or "-", len(self._turns))
        return self.history

    def _read(self) -> list[Turn]:
        path = self.path
        if path is None or not path.exists():
            return []
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("session.load.failed name={} error={}", self.name, exc)
            return []
        if not isinstance(payload, list):
            logger.warning("session.load.invalid name={} reason=not-an-array", self.name)
            return []
        turns: list[Turn] = []
        for item in payload:
            turn = Turn.from_payload(item)
            if turn is None:
                logger.warning("session.load.invalid name={} reason=bad-turn", self.name)
                return []
            turns.append(turn)
        return turns

    def append(self, role: Role, text: str) -> None:
        self.extend([Turn(role, text)])

    def extend(self, turns: Iterable[Turn]) -> None:
        if not self.persistent:
            return
        self._turns.extend(turns)
        self.save()

    def clear(self) -> None:
        self._turns = []
        self.save()

    def save(self) -> None:
        path = self.path
        if path is None:
            return
        self._turns = trim_turns(self._turns, self.max_pairs)
        content = json.dumps([turn.to_payload() for turn in self._turns], indent=2, ensure_ascii=False)
        try:
            ensure_private_dir(self.root)
            write_private_text(path, content + "\n")
        except OSError as exc:
            logger.warning("session.save.failed name={} error={}", self.name, exc)
            return
        logger.debug("session.save name={} turns={}", self.name, len(self._turns))
