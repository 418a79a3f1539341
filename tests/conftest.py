from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
import requests

from tutor.config import Settings
from tutor.gemini.client import GeminiClient
from tutor.session.store import SessionStore


def candidate_body(text: str) -> dict[str, Any]:
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


def sse_line(text: str) -> bytes:
    return b"data: " + json.dumps(candidate_body(text)).encode("utf-8") + b"\r\n\r\n"


class FakeResponse:
    def __init__(
        self,
        status_code: int = 200,
        body: Any = None,
        *,
        chunks: list[bytes] | None = None,
        fail_with: Exception | None = None,
    ) -> None:
        self.status_code = status_code
        if body is None:
            self.content = b""
        elif isinstance(body, bytes):
            self.content = body
        elif isinstance(body, str):
            self.content = body.encode("utf-8")
        else:
            self.content = json.dumps(body).encode("utf-8")
        self._chunks = chunks or []
        self._fail_with = fail_with
        self.closed = False

    def iter_content(self, chunk_size: int | None = None) -> Iterator[bytes]:
        assert chunk_size is None
        yield from self._chunks
        if self._fail_with is not None:
            raise self._fail_with

    def close(self) -> None:
        self.closed = True


class FakeHttp:
    """Stands in for ``requests.Session`` and replays queued responses."""

    def __init__(self, *responses: FakeResponse | Exception) -> None:
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        if not self.responses:
            raise AssertionError(f"unexpected request to {url}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        self.closed = True

    @property
    def last_contents(self) -> list[dict[str, Any]]:
        return self.calls[-1]["json"]["contents"]


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(api_key="test-key", home=tmp_path / "sessions", _env_file=None)


@pytest.fixture
def make_client(tmp_path: Path):
    def _make(
        *responses: FakeResponse | Exception, session: str = "", max_pairs: int = 10
    ) -> tuple[GeminiClient, FakeHttp]:
        http = FakeHttp(*responses)
        store = SessionStore(session, root=tmp_path / "sessions", max_pairs=max_pairs)
        client = GeminiClient("test-key", model="test-model", session=store, http=http)  # type: ignore[arg-type]
        return client, http

    return _make


@pytest.fixture
def connection_error() -> requests.ConnectionError:
    return requests.ConnectionError("connection refused")
