"""Sequential execution of external initialisation commands."""

from __future__ import annotations

import shlex
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from ..errors import CommandExecutionError
from ..utils import Reporter, run_command


@dataclass(frozen=True)
class CommandStep:
    """One external command to run inside a working directory."""

    command: tuple[str, ...]
    cwd: Path
    label: str = ""

    def __post_init__(self) -> None:
        if not self.command:
            raise ValueError("CommandStep requires a non-empty command")
        object.__setattr__(self, "command", tuple(self.command))
        if not self.label:
            object.__setattr__(self, "label", shlex.join(self.command))


@dataclass
class CommandResult:
    """Outcome of a finished step."""

    label: str
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def output(self) -> str:
        return "\n".join(part for part in (self.stdout, self.stderr) if part)


class CommandOrchestrator:
    """Runs :class:`CommandStep` objects strictly one after another.

    Output is captured rather than streamed.  There is no retry and no
    timeout: a step that blocks keeps the run waiting.
    """

    def __init__(self, reporter: Reporter | None = None) -> None:
        self.reporter = reporter

    async def run_step(self, step: CommandStep) -> CommandResult:
        if self.reporter is not None:
            self.reporter.command(step.label)
        try:
            returncode, stdout, stderr = await run_command(list(step.command), cwd=step.cwd)
        except OSError as exc:
            # Executable missing or cwd gone: the process never started.
            raise CommandExecutionError(step.label, 127, str(exc)) from exc

        result = CommandResult(step.label, returncode, stdout, stderr)
        if returncode != 0:
            raise CommandExecutionError(step.label, returncode, result.output)
        return result

    async def run(self, steps: Sequence[CommandStep]) -> list[CommandResult]:
        """Execute *steps* in order, stopping at the first failure.

        Raises:
            CommandExecutionError: For the first step with a non-zero exit
                status; later steps are not started.
        """
        results: list[CommandResult] = []
        for step in steps:
            results.append(await self.run_step(step))
        return results
