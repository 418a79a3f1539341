"""CLI main module for TerminalTutor."""

from __future__ import annotations

import sys

import typer

from tutor.config import DEFAULT_LANGUAGE, DEFAULT_MODEL, ConfigStore, Settings, load_settings
from tutor.core.assistant import Assistant
from tutor.core.budget import assess
from tutor.core.executor import ExecutionResult, run_and_capture
from tutor.core.commands import task_from_request
from tutor.core.explainer import ExplainerEngine, ExplainMode
from tutor.core.simulator import Simulator
from tutor.core.types import ExecuteIntent, IntentError
from tutor.errors import ConfigurationError
from tutor.gemini.client import GeminiClient
from tutor.logging_utils import configure_logging
from tutor.session.store import delete_session, list_sessions

from .console import run_console, run_smart_query
from .render import Renderer, create_cli_renderer

app = typer.Typer(
    name="tt",
    help="TerminalTutor - CLI tutor that lives in your shell.",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)
config_app = typer.Typer(help="Show or change the stored configuration.", no_args_is_help=True)
session_app = typer.Typer(help="Manage persistent sessions.", no_args_is_help=True)
app.add_typer(config_app, name="config")
app.add_typer(session_app, name="session")

DEFAULT_COMMAND = "ask"
# Words like "-la" belong to the command being asked about, not to tt.
PASSTHROUGH_CONTEXT = {"ignore_unknown_options": True}


class CliState:
    """Options shared by every command of one invocation."""

    def __init__(self, session_name: str = "") -> None:
        self.session_name = session_name


def build_settings() -> Settings:
    settings = load_settings()
    configure_logging(settings.log_level)
    return settings


def build_client(settings: Settings, session_name: str = "") -> GeminiClient:
    return GeminiClient.from_settings(settings, session_name=session_name)


def _exit_with_error(renderer: Renderer, message: str) -> typer.Exit:
    renderer.error(message)
    return typer.Exit(1)


def _open_client(ctx: typer.Context, renderer: Renderer) -> tuple[Settings, GeminiClient]:
    state: CliState = ctx.ensure_object(CliState)
    settings = build_settings()
    try:
        client = build_client(settings, state.session_name)
    except ConfigurationError as exc:
        raise _exit_with_error(renderer, str(exc)) from exc
    if state.session_name:
        _check_budget(client, settings, renderer)
    return settings, client


def _check_budget(client: GeminiClient, settings: Settings, renderer: Renderer) -> None:
    report = assess(client.count_session_tokens(), settings.token_limit)
    if report is not None and client.session is not None:
        renderer.budget(client.session.name, report)


def _build_assistant(client: GeminiClient, settings: Settings, renderer: Renderer) -> Assistant:
    def execute(command: str) -> ExecutionResult:
        renderer.command(command)
        return run_and_capture(command, limit=settings.output_limit, echo=renderer.raw_output)

    return Assistant(client, confirm=renderer.confirm_dangerous, execute=execute)


def _join(words: list[str]) -> str:
    return " ".join(words).strip()


@app.callback()
def main_callback(
    ctx: typer.Context,
    session: str = typer.Option("", "--session", "-s", help="Persistent conversation name"),
) -> None:
    ctx.obj = CliState(session_name=session.strip())


@app.command("ask", context_settings=PASSTHROUGH_CONTEXT)
def ask(ctx: typer.Context, query: list[str] = typer.Argument(..., help="Your question")) -> None:  # noqa: B008
    """Ask anything; the answer streams as it is generated."""
    renderer = create_cli_renderer()
    _, client = _open_client(ctx, renderer)
    with client:
        renderer.newline()
        result = client.generate_content_streaming(_join(query), renderer.chunk)
        renderer.info("\n")
    if not result.ok:
        raise _exit_with_error(renderer, result.error or "stream failed")


@app.command("run", context_settings=PASSTHROUGH_CONTEXT)
def run(ctx: typer.Context, task: list[str] = typer.Argument(..., help="What you want done")) -> None:  # noqa: B008
    """Turn a task into a shell command and execute it."""
    renderer = create_cli_renderer()
    settings, client = _open_client(ctx, renderer)
    with client:
        assistant = _build_assistant(client, settings, renderer)
        outcome = run_smart_query(_join(task), assistant, renderer)
        execution = outcome.execution
        if isinstance(outcome.intent, ExecuteIntent) and execution is not None and not execution.ok:
            _offer_fix(client, outcome.intent.command, execution, renderer)
    if execution is not None and not execution.ok:
        raise typer.Exit(execution.exit_code if execution.exit_code > 0 else 1)
    if isinstance(outcome.intent, IntentError):
        raise typer.Exit(1)


def _offer_fix(client: GeminiClient, command: str, execution: ExecutionResult, renderer: Renderer) -> None:
    if not renderer.confirm(f"Command exited with {execution.exit_code}. Ask for a fix?"):
        return
    renderer.suggestion(ExplainerEngine(client).suggest_fix(command, execution.output))


@app.command("suggest", context_settings=PASSTHROUGH_CONTEXT)
def suggest(
    ctx: typer.Context,
    request: list[str] = typer.Argument(..., help="Task or question"),  # noqa: B008
) -> None:
    """Suggest a command for a task without running it."""
    renderer = create_cli_renderer()
    _, client = _open_client(ctx, renderer)
    with client:
        renderer.explanation(ExplainerEngine(client).translate_question(task_from_request(_join(request))))


@app.command("explain", context_settings=PASSTHROUGH_CONTEXT)
def explain(
    ctx: typer.Context,
    command: list[str] = typer.Argument(..., help="Command to explain"),  # noqa: B008
    detailed: bool = typer.Option(False, "--detailed", "-d", help="Longer explanation with examples"),
) -> None:
    """Explain a command."""
    _explain(ctx, _join(command), ExplainMode.DETAILED if detailed else ExplainMode.NORMAL)


@app.command("eli5", context_settings=PASSTHROUGH_CONTEXT)
def eli5(ctx: typer.Context, command: list[str] = typer.Argument(..., help="Command to explain")) -> None:  # noqa: B008
    """Explain a command like I'm 5."""
    _explain(ctx, _join(command), ExplainMode.ELI5)


def _explain(ctx: typer.Context, command: str, mode: ExplainMode) -> None:
    renderer = create_cli_renderer()
    _, client = _open_client(ctx, renderer)
    with client:
        if mode is ExplainMode.NORMAL:
            response = client.explain_command(command)
            if not response.ok:
                raise _exit_with_error(renderer, response.error or "request failed")
            renderer.explanation(response.content)
            return
        renderer.explanation(ExplainerEngine(client).explain(command, mode))


@app.command("whatif", context_settings=PASSTHROUGH_CONTEXT)
def whatif(
    ctx: typer.Context,
    command: list[str] = typer.Argument(..., help="Command to simulate"),  # noqa: B008
) -> None:
    """Simulate what a command would do, without running it."""
    renderer = create_cli_renderer()
    _, client = _open_client(ctx, renderer)
    with client:
        renderer.simulation(Simulator(client).simulate(_join(command)))


@app.command("console")
def console(ctx: typer.Context) -> None:
    """Interactive console mode."""
    renderer = create_cli_renderer()
    settings, client = _open_client(ctx, renderer)
    with client:
        run_console(client, _build_assistant(client, settings, renderer), renderer)


@app.command("auth")
def auth() -> None:
    """Validate and store an API key."""
    renderer = create_cli_renderer()
    settings = build_settings()
    api_key = typer.prompt("Paste your API key (hidden input)", hide_input=True, default="", show_default=False).strip()
    if not api_key:
        raise _exit_with_error(renderer, "Empty API key.")
    renderer.info("Validating API key...")
    with GeminiClient(api_key, model=settings.model, language=settings.language, api_base=settings.api_base) as client:
        response = client.validate()
    if not response.ok:
        raise _exit_with_error(renderer, f"Invalid API key - {response.error}")
    ConfigStore().set("api_key", api_key)
    renderer.info("[green]API key validated and saved![/green]")


@config_app.command("list")
def config_list() -> None:
    """Show the current configuration."""
    renderer = create_cli_renderer()
    settings = build_settings()
    renderer.info("[bold]Current Configuration:[/bold]")
    renderer.info(f"  Model:    {settings.model}")
    renderer.info(f"  Language: {settings.language}")
    renderer.info(f"  Sessions: {settings.home}")


@config_app.command("reset")
def config_reset() -> None:
    """Reset model and language to defaults."""
    renderer = create_cli_renderer()
    ConfigStore().reset()
    renderer.info(f"[green]Configuration reset to defaults ({DEFAULT_MODEL}, {DEFAULT_LANGUAGE}).[/green]")


@config_app.command("set")
def config_set(assignment: str = typer.Argument(..., help="model=<name> or language=<code>")) -> None:
    """Set the model or the response language."""
    renderer = create_cli_renderer()
    key, _, value = assignment.partition("=")
    key, value = key.strip(), value.strip()
    if key not in ("model", "language"):
        raise _exit_with_error(renderer, "Unknown config. Use model=<name> or language=<code>.")
    if not value:
        raise _exit_with_error(renderer, f"Empty {key}.")

    if key == "model":
        settings = build_settings()
        if not settings.api_key:
            raise _exit_with_error(renderer, "Configure API key first with 'tt auth'")
        renderer.info(f"Validating model {value}...")
        with GeminiClient(
            settings.api_key, model=value, language=settings.language, api_base=settings.api_base
        ) as client:
            response = client.validate()
        if not response.ok:
            raise _exit_with_error(renderer, f"Invalid model - {response.error}")

    ConfigStore().set(key, value)
    renderer.info(f"[green]{key.capitalize()} set: {value}[/green]")


@session_app.command("list")
def session_list() -> None:
    """List available sessions."""
    renderer = create_cli_renderer()
    names = list_sessions(build_settings().home)
    if not names:
        renderer.info("No sessions found.")
        return
    renderer.info("[bold]Available sessions:[/bold]")
    for name in names:
        renderer.info(f"  {name}")


@session_app.command("delete")
def session_delete(name: str = typer.Argument(..., help="Session to delete")) -> None:
    """Delete a session."""
    renderer = create_cli_renderer()
    if not delete_session(name, build_settings().home):
        raise _exit_with_error(renderer, "Session not found.")
    renderer.info(f"[green]Session '{name}' deleted.[/green]")


def _command_names() -> set[str]:
    names = {command.name for command in app.registered_commands if command.name}
    names.update(group.name for group in app.registered_groups if group.name)
    return names


def with_default_command(args: list[str]) -> list[str]:
    """Insert ``ask`` when the first positional word is not a command."""
    index = 0
    while index < len(args):
        token = args[index]
        if token in ("--session", "-s"):
            index += 2
            continue
        if token.startswith("--session="):
            index += 1
            continue
        if token.startswith("-"):
            return args
        break
    if index < len(args) and args[index] not in _command_names():
        return [*args[:index], DEFAULT_COMMAND, *args[index:]]
    return args


def main() -> None:
    app(args=with_default_command(sys.argv[1:]), prog_name="tt")


if __name__ == "__main__":
    main()
