"""Shell execution with merged, size-capped output capture."""

from __future__ import annotations

import shutil
import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from typing import IO, cast

from loguru import logger

DEFAULT_OUTPUT_LIMIT = 2000
TRUNCATION_MARKER = "\n... [output truncated]"

OutputEcho = Callable[[str], None]


@dataclass(frozen=True)
class ExecutionResult:
    """Exit status and captured stdout+stderr of one command."""

    exit_code: int
    output: str
    truncated: bool = False

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


def cap_output(output: str, limit: int = DEFAULT_OUTPUT_LIMIT) -> tuple[str, bool]:
    if len(output) <= limit:
        return output, False
    return output[:limit] + TRUNCATION_MARKER, True


def run_and_capture(
    command: str,
    *,
    limit: int = DEFAULT_OUTPUT_LIMIT,
    echo: OutputEcho | None = None,
    cwd: str | None = None,
) -> ExecutionResult:
    """Run ``command`` through bash, echoing output as it arrives.

    The full output is echoed; only the captured copy is capped.
    """
    bash_executable = shutil.which("bash") or "bash"
    logger.info("executor.run command={!r}", command)
    try:
        # The command was vetted and, when dangerous, confirmed by the user.
        process = subprocess.Popen(  # noqa: S603
            [bash_executable, "-c", command],
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.warning("executor.spawn.failed command={!r} error={}", command, exc)
        return ExecutionResult(-1, f"Failed to execute command: {exc!s}")

    chunks: list[str] = []
    # stdout is always a pipe here.
    stdout = cast(IO[str], process.stdout)
    with stdout:
        for line in stdout:
            chunks.append(line)
            if echo is not None:
                echo(line)
    exit_code = process.wait()
    if exit_code < 0:
        # Killed by a signal.
        exit_code = -1
    output, truncated = cap_output("".join(chunks), limit)
    logger.info("executor.done exit={} truncated={}", exit_code, truncated)
    return ExecutionResult(exit_code, output, truncated)
