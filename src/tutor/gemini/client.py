"""HTTP client for the Gemini generative-language API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import requests
from loguru import logger

from tutor.config import DEFAULT_API_BASE, DEFAULT_LANGUAGE, DEFAULT_MODEL, Settings
from tutor.core.budget import TOKEN_COUNT_FAILED
from tutor.core.classifier import classify
from tutor.core.types import IntentError, SmartResponse
from tutor.errors import ServiceError, TransportError
from tutor.session.store import SessionStore, Turn

from . import payload as prompts
from .parser import HTTP_OK, check_status, extract_text, extract_total_tokens
from .stream import ChunkSink, StreamAccumulator, StreamResult, consume

COMMAND_OUTPUT_ACK = "Got it. I'll remember this output for context."
TOKEN_COUNT_TIMEOUT = 10.0


@dataclass(frozen=True)
class GeminiResponse:
    """Outcome of one blocking call."""

    content: str = ""
    error: str | None = None
    error_kind: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def command_output_turns(command: str, output: str) -> list[Turn]:
    return [
        Turn("user", f"I executed: {command}\n\nOutput:\n{output}"),
        Turn("model", COMMAND_OUTPUT_ACK),
    ]


class GeminiClient:
    """Service client owning its configuration, transport and session.

    Every public call returns a result value; transport and protocol failures
    never escape as exceptions. Turns are committed to the session only after
    the service answered successfully.
    """

    def __init__(
        self,
        api_key: str,
        *,
        model: str = DEFAULT_MODEL,
        language: str = DEFAULT_LANGUAGE,
        session: SessionStore | None = None,
        api_base: str = DEFAULT_API_BASE,
        connect_timeout: float = 30.0,
        read_timeout: float = 60.0,
        stream_read_timeout: float = 120.0,
        http: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model or DEFAULT_MODEL
        self.language = language or DEFAULT_LANGUAGE
        self.api_base = api_base.rstrip("/")
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self.stream_read_timeout = stream_read_timeout
        self._http = http or requests.Session()
        self.session = session
        if self.session is not None:
            self.session.load()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        session_name: str = "",
        http: requests.Session | None = None,
    ) -> GeminiClient:
        session = SessionStore(session_name, root=settings.home, max_pairs=settings.max_history_pairs)
        return cls(
            settings.require_api_key(),
            model=settings.model,
            language=settings.language,
            session=session,
            api_base=settings.api_base,
            connect_timeout=settings.connect_timeout,
            read_timeout=settings.read_timeout,
            stream_read_timeout=settings.stream_read_timeout,
            http=http,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> GeminiClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def history(self) -> list[Turn]:
        if self.session is None:
            return []
        return self.session.history

    def _endpoint(self, action: str) -> str:
        return f"{self.api_base}/v1beta/models/{self.model}:{action}"

    def _post(
        self,
        action: str,
        body: dict[str, Any],
        *,
        read_timeout: float,
        stream: bool = False,
    ) -> requests.Response:
        params = {"key": self.api_key}
        if stream:
            params["alt"] = "sse"
        logger.info("gemini.request action={} model={} turns={}", action, self.model, len(body.get("contents", [])))
        try:
            return self._http.post(
                self._endpoint(action),
                params=params,
                json=body,
                stream=stream,
                timeout=(self.connect_timeout, read_timeout),
            )
        except requests.RequestException as exc:
            raise TransportError(f"Network error: {exc!s}") from exc

    def _commit(self, prompt: str, answer: str) -> None:
        if self.session is not None:
            self.session.extend([Turn("user", prompt), Turn("model", answer)])

    # Blocking calls

    def send(self, prompt: str, *, use_history: bool = True) -> GeminiResponse:
        history = self.history if use_history else []
        try:
            response = self._post(
                "generateContent",
                prompts.build_request(history, prompt),
                read_timeout=self.read_timeout,
            )
            check_status(response.status_code, response.content)
            text = extract_text(response.content)
        except ServiceError as exc:
            logger.warning("gemini.request.failed kind={} error={}", exc.kind, exc)
            return GeminiResponse(error=str(exc), error_kind=exc.kind)
        if use_history:
            self._commit(prompt, text)
        return GeminiResponse(content=text)

    def generate_content(self, prompt: str) -> GeminiResponse:
        return self.send(prompt)

    def explain_command(self, command: str) -> GeminiResponse:
        return self.send(prompts.explain_command_prompt(command, self.language))

    def suggest_command(self, task: str) -> GeminiResponse:
        return self.send(prompts.suggest_command_prompt(task, self.language))

    def simulate_command(self, command: str, context: str = "") -> GeminiResponse:
        return self.send(prompts.simulate_prompt(command, self.language, context))

    def validate(self) -> GeminiResponse:
        """Check the key and model with a history-free ping."""
        return self.send(prompts.VALIDATION_PROMPT, use_history=False)

    def smart_query(self, query: str) -> SmartResponse:
        response = self.send(prompts.smart_query_prompt(query, self.language))
        if not response.ok:
            return IntentError(response.error or "request failed", kind=response.error_kind or "service")
        return classify(response.content)

    # Streaming calls

    def stream(self, prompt: str, sink: ChunkSink | None = None, *, use_history: bool = True) -> StreamResult:
        """Stream one turn, passing each text fragment to ``sink`` as it arrives."""
        history = self.history if use_history else []
        accumulator = StreamAccumulator(sink)
        response: requests.Response | None = None
        try:
            response = self._post(
                "streamGenerateContent",
                prompts.build_request(history, prompt),
                read_timeout=self.stream_read_timeout,
                stream=True,
            )
            try:
                if response.status_code != HTTP_OK:
                    # Error replies are small JSON bodies, not event streams.
                    check_status(response.status_code, response.content)
                consume(response.iter_content(chunk_size=None), accumulator)
            except requests.RequestException as exc:
                raise TransportError(f"Stream interrupted: {exc!s}") from exc
        except ServiceError as exc:
            logger.warning("gemini.stream.failed kind={} error={} partial={}", exc.kind, exc, len(accumulator.text))
            return StreamResult(text=accumulator.text, error=str(exc), error_kind=exc.kind)
        finally:
            if response is not None:
                response.close()
        text = accumulator.text
        if use_history:
            self._commit(prompt, text)
        return StreamResult(text=text)

    def generate_content_streaming(self, prompt: str, sink: ChunkSink | None = None) -> StreamResult:
        return self.stream(prompts.plain_prompt(prompt, self.language), sink)

    def smart_query_streaming(self, query: str, sink: ChunkSink | None = None) -> SmartResponse:
        result = self.stream(prompts.smart_query_prompt(query, self.language), sink)
        if not result.ok:
            return IntentError(result.error or "stream failed", kind=result.error_kind or "service")
        return classify(result.text)

    # Session context

    def add_command_output(self, command: str, output: str) -> None:
        if self.session is not None:
            self.session.extend(command_output_turns(command, output))

    def count_session_tokens(self) -> int:
        """Ask the service for the token size of the session history.

        Returns 0 for an empty history and ``TOKEN_COUNT_FAILED`` on any error.
        """
        history = self.history
        if not history:
            return 0
        try:
            response = self._post(
                "countTokens",
                prompts.build_count_request(history),
                read_timeout=TOKEN_COUNT_TIMEOUT,
            )
        except TransportError as exc:
            logger.warning("gemini.count_tokens.failed error={}", exc)
            return TOKEN_COUNT_FAILED
        if response.status_code != HTTP_OK:
            logger.warning("gemini.count_tokens.failed status={}", response.status_code)
            return TOKEN_COUNT_FAILED
        total = extract_total_tokens(response.content)
        return TOKEN_COUNT_FAILED if total is None else total
