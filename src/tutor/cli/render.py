"""CLI renderer for TerminalTutor."""

from __future__ import annotations

import threading

from prompt_toolkit import PromptSession
from prompt_toolkit.patch_stdout import patch_stdout
from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt

from tutor.core.budget import BudgetReport, BudgetTier
from tutor.core.simulator import SimulationResult


class Renderer:
    """CLI renderer using Rich for terminal output."""

    def __init__(self, console: Console | None = None) -> None:
        self.console: Console = console or Console(highlight=False)
        self._prompt_session: PromptSession[str] | None = None
        self._print_lock = threading.Lock()

    def info(self, message: str) -> None:
        """Render an info message."""
        self._print(message)

    def error(self, message: str) -> None:
        """Render an error message."""
        self._print(f"[bold red]Error:[/bold red] {escape(message)}")

    def warning(self, message: str) -> None:
        self._print(f"\n[red]⚠️  [bold]{escape(message)}[/bold][/red]")

    def suggestion(self, message: str) -> None:
        """Render a one-line explanation of a proposed command."""
        self._print(f"\n[yellow]💡[/yellow] {escape(message)}\n")

    def explanation(self, message: str) -> None:
        self._print(f"\n[cyan]📖[/cyan] {escape(message)}")

    def command(self, command: str) -> None:
        """Render the command about to run."""
        self._print(f"[cyan]$ {escape(command)}[/cyan]\n")

    def chunk(self, text: str) -> None:
        """Render one streamed fragment without a line break."""
        with self._print_lock:
            self.console.print(text, end="", markup=False, highlight=False, soft_wrap=True)

    def raw_output(self, text: str) -> None:
        with self._print_lock:
            self.console.out(text, end="", highlight=False)

    def newline(self) -> None:
        self._print("")

    def welcome(self, session_name: str = "") -> None:
        """Render the console banner."""
        self._print("[bold]TerminalTutor Interactive Console[/bold]")
        if session_name:
            self._print(f"Session: [green]{escape(session_name)}[/green]")
        self._print("Type 'exit' or 'quit' to leave, 'clear' to clear session\n")

    def confirm_dangerous(self, command: str, reasons: list[str]) -> bool:
        """Ask for an explicit 'yes' before a dangerous command runs."""
        self._print("\n[bold red]⚠️  WARNING: POTENTIALLY DANGEROUS COMMAND![/bold red]")
        self._print("[red]This command may cause irreversible damage to your system or data.[/red]")
        self._print(f"Command: [bold]{escape(command)}[/bold]")
        for reason in reasons:
            self._print(f"[dim]  - {escape(reason)}[/dim]")
        self._print("")
        try:
            answer = Prompt.ask(
                "[yellow]Type 'yes' to confirm execution[/yellow]", console=self.console, default="", show_default=False
            )
        except EOFError:
            return False
        return answer.strip() == "yes"

    def confirm(self, question: str) -> bool:
        """Ask a yes/no question; closed input counts as no."""
        try:
            return Confirm.ask(question, console=self.console, default=False)
        except EOFError:
            return False

    def budget(self, session_name: str, report: BudgetReport) -> None:
        """Warn when a session's context approaches the token ceiling."""
        usage = int(report.percent)
        if report.tier is BudgetTier.URGENT:
            self._print(
                f"[red]⚠️  WARNING: Session '{escape(session_name)}' is using {usage}% of token limit "
                f"({report.tokens} tokens).\nConsider creating a new session to avoid context overflow.[/red]\n"
            )
        elif report.tier is BudgetTier.ADVISORY:
            self._print(
                f"[yellow]💡 ATTENTION: Session '{escape(session_name)}' is using {usage}% of token limit "
                f"({report.tokens} tokens).\nConsider creating a new session soon.[/yellow]\n"
            )

    def simulation(self, result: SimulationResult) -> None:
        if result.is_destructive:
            self.warning("POTENTIALLY DESTRUCTIVE COMMAND!")
        for warning in result.warnings:
            self._print(f"[red]⚠️  {escape(warning)}[/red]")
        self._print("\n[cyan]🔮 Simulation:[/cyan]")
        self._print(escape(result.predicted_output))
        if result.files_affected:
            self._print("\n[bold]Files affected:[/bold]")
            for name in result.files_affected:
                self._print(f"  - {escape(name)}")

    def get_user_input(self) -> str:
        """Prompt user for input."""
        if self._prompt_session is None:
            self._prompt_session = PromptSession()
        with patch_stdout(raw=True):
            return self._prompt_session.prompt("tt > ")

    def _print(self, message: str) -> None:
        with self._print_lock:
            self.console.print(message)


def create_cli_renderer() -> Renderer:
    """Create and return a Renderer instance."""
    return Renderer()
