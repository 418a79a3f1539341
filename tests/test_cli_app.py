import importlib
import json
from pathlib import Path

import pytest
from conftest import FakeResponse, candidate_body, sse_line
from typer.testing import CliRunner

from tutor.errors import ApiKeyNotConfiguredError
from tutor.session.store import SessionStore, Turn, list_sessions

cli_app_module = importlib.import_module("tutor.cli.app")


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def wire(monkeypatch, settings):
    """Route the CLI to a prepared client instead of the real service."""

    def _wire(client) -> dict[str, str]:
        seen: dict[str, str] = {}

        def _build_client(_settings, session_name=""):
            seen["session"] = session_name
            return client

        monkeypatch.setattr(cli_app_module, "build_settings", lambda: settings)
        monkeypatch.setattr(cli_app_module, "build_client", _build_client)
        return seen

    return _wire


def test_ask_streams_answer(runner, wire, make_client) -> None:
    client, http = make_client(FakeResponse(200, chunks=[sse_line("Hel"), sse_line("lo there")]))
    wire(client)

    result = runner.invoke(cli_app_module.app, ["ask", "say", "hi"])

    assert result.exit_code == 0
    assert "Hello there" in result.output
    assert "say hi" in http.last_contents[0]["parts"][0]["text"]
    assert http.closed


def test_ask_reports_stream_failure(runner, wire, make_client) -> None:
    client, _ = make_client(FakeResponse(500, {"error": {"message": "boom"}}))
    wire(client)

    result = runner.invoke(cli_app_module.app, ["ask", "hi"])

    assert result.exit_code == 1
    assert "API error: HTTP 500 - boom" in result.output


def test_session_option_reaches_client_and_budget_check(runner, wire, make_client, settings) -> None:
    store = SessionStore("proj", root=settings.home)
    store.extend([Turn("user", "q"), Turn("model", "a")])
    client, _ = make_client(
        FakeResponse(200, {"totalTokens": 900_000}),
        FakeResponse(200, chunks=[sse_line("ok")]),
        session="proj",
    )
    seen = wire(client)

    result = runner.invoke(cli_app_module.app, ["--session", "proj", "ask", "hi"])

    assert result.exit_code == 0
    assert seen["session"] == "proj"
    assert "WARNING" in result.output
    assert "90%" in result.output


def test_missing_api_key_exits_with_error(runner, monkeypatch, settings) -> None:
    def _build_client(_settings, session_name=""):
        raise ApiKeyNotConfiguredError("API key not configured. Run 'tt auth' or set GEMINI_API_KEY.")

    monkeypatch.setattr(cli_app_module, "build_settings", lambda: settings)
    monkeypatch.setattr(cli_app_module, "build_client", _build_client)

    result = runner.invoke(cli_app_module.app, ["ask", "hi"])

    assert result.exit_code == 1
    assert "API key not configured" in result.output


def test_run_executes_safe_command(runner, wire, make_client) -> None:
    body = candidate_body('{"type":"execute","command":"echo tutor-ok","explanation":"Prints a word"}')
    client, _ = make_client(FakeResponse(200, body))
    wire(client)

    result = runner.invoke(cli_app_module.app, ["run", "print", "a", "word"])

    assert result.exit_code == 0
    assert "Prints a word" in result.output
    assert "$ echo tutor-ok" in result.output
    assert "tutor-ok\n" in result.output


def test_run_propagates_command_exit_code(runner, wire, make_client) -> None:
    client, _ = make_client(FakeResponse(200, candidate_body('{"type":"execute","command":"exit 4"}')))
    wire(client)

    result = runner.invoke(cli_app_module.app, ["run", "fail"], input="n\n")

    assert result.exit_code == 4
    assert "Ask for a fix?" in result.output


def test_run_offers_fix_after_failure(runner, wire, make_client) -> None:
    client, http = make_client(
        FakeResponse(200, candidate_body('{"type":"execute","command":"echo oops; exit 2"}')),
        FakeResponse(200, candidate_body("Drop the exit.")),
    )
    wire(client)

    result = runner.invoke(cli_app_module.app, ["run", "fail"], input="y\n")

    assert result.exit_code == 2
    assert "Drop the exit." in result.output
    sent = http.last_contents[0]["parts"][0]["text"]
    assert "Failed command: echo oops; exit 2" in sent
    assert "Error message: oops" in sent


def test_suggest_strips_question_phrase(runner, wire, make_client) -> None:
    client, http = make_client(FakeResponse(200, candidate_body("du -sh * | sort -h")))
    wire(client)

    result = runner.invoke(cli_app_module.app, ["suggest", "how", "do", "I", "find", "big", "folders?"])

    assert result.exit_code == 0
    assert "du -sh * | sort -h" in result.output
    assert http.last_contents[0]["parts"][0]["text"].startswith("User wants to: find big folders\n")


def test_run_aborts_unconfirmed_dangerous_command(runner, wire, make_client, tmp_path: Path) -> None:
    target = tmp_path / "keep"
    target.mkdir()
    body = candidate_body(json.dumps({"type": "execute", "command": f"rm -rf {target}"}))
    client, _ = make_client(FakeResponse(200, body))
    wire(client)

    result = runner.invoke(cli_app_module.app, ["run", "delete", "it"], input="no\n")

    assert result.exit_code == 0
    assert "POTENTIALLY DANGEROUS COMMAND" in result.output
    assert "Aborted." in result.output
    assert target.exists()


def test_run_exits_non_zero_on_service_failure(runner, wire, make_client, connection_error) -> None:
    client, _ = make_client(connection_error)
    wire(client)

    result = runner.invoke(cli_app_module.app, ["run", "list", "files"])

    assert result.exit_code == 1
    assert "Network error" in result.output


def test_explain_prints_answer(runner, wire, make_client) -> None:
    client, _ = make_client(FakeResponse(200, candidate_body("Lists directory contents.")))
    wire(client)

    result = runner.invoke(cli_app_module.app, ["explain", "ls", "-la"])

    assert result.exit_code == 0
    assert "Lists directory contents." in result.output


def test_whatif_prints_simulation(runner, wire, make_client) -> None:
    reply = "FILES_AFFECTED: notes.txt\nEXPECTED_OUTPUT: nothing\nDESTRUCTIVENESS: LOW"
    client, _ = make_client(FakeResponse(200, candidate_body(reply)))
    wire(client)

    result = runner.invoke(cli_app_module.app, ["whatif", "touch", "notes.txt"])

    assert result.exit_code == 0
    assert "Simulation" in result.output
    assert "notes.txt" in result.output


def test_session_list_and_delete(runner, monkeypatch, settings) -> None:
    monkeypatch.setattr(cli_app_module, "build_settings", lambda: settings)
    SessionStore("alpha", root=settings.home).append("user", "x")

    listed = runner.invoke(cli_app_module.app, ["session", "list"])
    deleted = runner.invoke(cli_app_module.app, ["session", "delete", "alpha"])
    missing = runner.invoke(cli_app_module.app, ["session", "delete", "alpha"])

    assert "alpha" in listed.output
    assert deleted.exit_code == 0
    assert list_sessions(settings.home) == []
    assert missing.exit_code == 1
    assert "Session not found." in missing.output


def test_config_set_language_and_reset(runner, monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    config_path = tmp_path / ".config" / "tt" / "config.json"

    result = runner.invoke(cli_app_module.app, ["config", "set", "language=pt-br"])
    assert result.exit_code == 0
    assert json.loads(config_path.read_text(encoding="utf-8")) == {"language": "pt-br"}

    result = runner.invoke(cli_app_module.app, ["config", "reset"])
    assert result.exit_code == 0
    assert json.loads(config_path.read_text(encoding="utf-8")) == {}


def test_config_set_rejects_unknown_key(runner, monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))

    result = runner.invoke(cli_app_module.app, ["config", "set", "colour=red"])

    assert result.exit_code == 1
    assert "Unknown config" in result.output


def test_auth_rejects_empty_key(runner, monkeypatch, settings) -> None:
    monkeypatch.setattr(cli_app_module, "build_settings", lambda: settings)

    result = runner.invoke(cli_app_module.app, ["auth"], input="\n")

    assert result.exit_code == 1
    assert "Empty API key." in result.output


@pytest.mark.parametrize(
    ("args", "expected"),
    [
        (["how", "do", "I", "list", "files"], ["ask", "how", "do", "I", "list", "files"]),
        (["explain", "ls"], ["explain", "ls"]),
        (["--session", "work", "hello"], ["--session", "work", "ask", "hello"]),
        (["-s", "work", "run", "x"], ["-s", "work", "run", "x"]),
        (["--session=work", "hello"], ["--session=work", "ask", "hello"]),
        (["--help"], ["--help"]),
        (["session", "list"], ["session", "list"]),
        ([], []),
    ],
)
def test_with_default_command(args: list[str], expected: list[str]) -> None:
    assert cli_app_module.with_default_command(args) == expected
