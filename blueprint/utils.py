"""Shared utility functions for Blueprint.

Provides async command execution, JSON I/O and Rich-based
console output, including the :class:`ConsoleReporter` progress sink that the
generation engine reports to.
"""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

from rich.console import Console
from rich.rule import Rule
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: str | list[str],
    cwd: str | Path | None = None,
    timeout: float | None = None,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run a command asynchronously and capture its output.

    Args:
        cmd: Shell command string or list of arguments.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed.
            ``None`` waits for the process however long it takes.
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    if isinstance(cmd, list):
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(cwd) if cwd else None,
            env=merged_env,
        )
    else:
        process = await asyncio.create_subprocess_shell(
            cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(cwd) if cwd else None,
            env=merged_env,
        )

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (
            -1,
            "",
            f"Command timed out after {timeout}s: {cmd if isinstance(cmd, str) else ' '.join(cmd)}",
        )

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> dict[str, Any]:
    """Load and parse a JSON file whose top level is an object.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If the top-level value is not an object.
    """
    raw = Path(path).read_text(encoding="utf-8")
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {path}, got {type(data).__name__}")
    return data


def save_json(data: dict[str, Any] | list[Any], path: str | Path) -> None:
    """Atomically write *data* as pretty-printed JSON.

    The content goes to a temporary file in the destination directory which
    then replaces *path*, so readers never observe a partially written file.
    """
    file_path = Path(path)
    content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"

    fd, tmp_name = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        os.replace(tmp_name, file_path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


STAGE_COLORS: dict[str, str] = {
    "validating": "bright_cyan",
    "rendering": "bright_green",
    "splicing": "bright_green",
    "initializing": "bright_yellow",
    "merging": "bright_magenta",
    "installing": "bright_yellow",
    "done": "bright_blue",
    "failed": "bright_red",
}


def print_stage_header(stage: str) -> None:
    """Print a full-width rule announcing a generation stage."""
    color = STAGE_COLORS.get(stage, "white")
    console.print(
        Rule(f"[bold {color}] {stage.upper()} [/bold {color}]", style=color)
    )


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_info(message: str) -> None:
    """Print a blue informational message."""
    console.print(f"[blue]{message}[/blue]")


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")


def print_debug(message: str) -> None:
    """Print a dim grey debug message."""
    console.print(f"[grey50]{message}[/grey50]")


# ---------------------------------------------------------------------------
# Progress sink
# ---------------------------------------------------------------------------


class Reporter(Protocol):
    """Methods the generation engine calls to report progress and failures."""

    def stage(self, stage: str) -> None: ...

    def file_generated(self, path: Path) -> None: ...

    def command(self, label: str) -> None: ...

    def info(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class ConsoleReporter:
    """Progress and failure sink backed by the shared Rich console.

    The generation engine only calls these methods; any object exposing the
    same names can be passed in its place.
    """

    def __init__(self, verbose: bool = True) -> None:
        self.verbose = verbose

    def stage(self, stage: str) -> None:
        if self.verbose:
            print_stage_header(stage)

    def file_generated(self, path: Path) -> None:
        if self.verbose:
            print_info(f"generated file: {path}")

    def command(self, label: str) -> None:
        if self.verbose:
            print_debug(f"$ {label}")

    def info(self, message: str) -> None:
        print_info(message)

    def success(self, message: str) -> None:
        print_success(message)

    def warning(self, message: str) -> None:
        print_warning(message)

    def error(self, message: str) -> None:
        print_error(message)
