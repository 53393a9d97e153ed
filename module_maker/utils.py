"""Shared utility functions for Module Maker.

Provides Rich-based console reporting, human-readable formatting, whole-file
text I/O, and synchronous execution of the host project's helper tools
(composer, artisan). Output helpers all write to the module-level
``console`` so tests can swap it for a recording console.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from module_maker.errors import ExternalToolError, GenerationError

console = Console()

# ---------------------------------------------------------------------------
# Whole-file text I/O
# ---------------------------------------------------------------------------


def read_text(path: Path) -> str:
    """Read a UTF-8 text file, preserving line endings exactly.

    Raises:
        GenerationError: Wrapping an ``OSError`` or a decoding failure.
    """
    try:
        with open(path, encoding="utf-8", newline="") as handle:
            return handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise GenerationError(path, exc, action="read") from exc


def write_text(path: Path, content: str) -> Path:
    """Write *content* to *path* in one call, creating parent directories.

    Raises:
        GenerationError: Wrapping any ``OSError`` raised while writing.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)
    except OSError as exc:
        raise GenerationError(path, exc) from exc
    return path


def ensure_dir(path: Path) -> Path:
    """Create a directory (and parents) if it does not exist."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise GenerationError(path, exc) from exc
    return path


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_bytes(size: int) -> str:
    """Format a byte count the way the module tables display it.

    Examples::

        format_bytes(512)     -> "512 B"
        format_bytes(1536)    -> "1.5 KB"
        format_bytes(1048576) -> "1 MB"
    """
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{_trim(size / 1024)} KB"
    return f"{_trim(size / (1024 * 1024))} MB"


def _trim(value: float) -> str:
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return text or "0"


def relative_to_root(path: Path, root: Path) -> str:
    """Return *path* relative to *root* when possible, else as given."""
    try:
        return path.resolve().relative_to(root.resolve()).as_posix()
    except ValueError:
        return str(path)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{escape(message)}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]")


def print_info(message: str) -> None:
    console.print(f"[cyan]{escape(message)}[/cyan]")


def print_hint(message: str) -> None:
    console.print(f"[dim]{escape(message)}[/dim]")


def print_line(message: str = "") -> None:
    console.print(escape(message))


def print_banner(title: str) -> None:
    """Print a boxed banner used at the top of the dashboard."""
    console.print()
    console.print(Panel.fit(f"[bold]{title}[/bold]", border_style="bright_blue", padding=(1, 8)))
    console.print()


def print_table(
    columns: list[str],
    rows: list[list[str]],
    title: str | None = None,
) -> None:
    """Print a simple table with a bold cyan header row."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    for index, column in enumerate(columns):
        table.add_column(column, no_wrap=index == 0)
    for row in rows:
        table.add_row(*(escape(str(cell)) for cell in row))
    console.print(table)


# ---------------------------------------------------------------------------
# External tools
# ---------------------------------------------------------------------------


def run_tool(cmd: list[str], cwd: Path, timeout: int = 120) -> str:
    """Run a host-project helper command and return its stdout.

    Args:
        cmd: Argument list, e.g. ``["composer", "dump-autoload", "-q"]``.
        cwd: Working directory (the host project root).
        timeout: Maximum wall-clock seconds before the process is killed.

    Raises:
        ExternalToolError: The binary is missing, timed out, or exited
            with a non-zero status.
    """
    try:
        completed = subprocess.run(
            cmd,
            cwd=str(cwd),
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as exc:
        raise ExternalToolError(cmd, f"executable not found ({exc.filename or cmd[0]})") from exc
    except subprocess.TimeoutExpired as exc:
        raise ExternalToolError(cmd, f"timed out after {timeout}s") from exc

    if completed.returncode != 0:
        detail = (completed.stderr or completed.stdout or "").strip().splitlines()
        reason = detail[-1] if detail else f"exit code {completed.returncode}"
        raise ExternalToolError(cmd, reason)
    return completed.stdout.strip()
