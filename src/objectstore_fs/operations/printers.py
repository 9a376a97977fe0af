"""
Human-readable output formatting.

Centralizes all CLI output so commands only decide what to show.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..models import Entry

_console = Console()
_err_console = Console(stderr=True)


def print_listing(entries: List[Entry], title: Optional[str] = None) -> None:
    """
    Print a directory listing as a table.

    Directories sort before files; both groups sort by path.

    Args:
        entries: Listing entries to display
        title: Optional table title (usually the listed directory)
    """
    if not entries:
        _console.print("[dim]No entries[/]")
        return

    table = Table(title=title)
    table.add_column("Type", style="cyan")
    table.add_column("Path")
    table.add_column("Size", justify="right", style="yellow")
    table.add_column("Modified", style="dim")

    for entry in sorted(entries, key=lambda e: (e.is_file, e.path)):
        table.add_row(
            entry.type,
            escape(entry.path + ("/" if entry.is_dir else "")),
            _format_bytes(entry.size) if entry.size is not None else "",
            _format_timestamp(entry.timestamp),
        )

    _console.print(table)


def print_entry(entry: Entry, verbose: bool = False) -> None:
    """
    Print a single entry's metadata.

    Args:
        entry: Entry to display
        verbose: Also show raw response headers
    """
    _console.print(f"[bold]Path:[/] {escape(entry.path)}")
    _console.print(f"[bold]Type:[/] {entry.type}")
    if entry.size is not None:
        _console.print(f"[bold]Size:[/] {_format_bytes(entry.size)} ({entry.size} bytes)")
    if entry.mimetype:
        _console.print(f"[bold]Mimetype:[/] {escape(entry.mimetype)}")
    if entry.timestamp is not None:
        _console.print(f"[bold]Modified:[/] {_format_timestamp(entry.timestamp)}")
    if entry.etag:
        _console.print(f"[bold]ETag:[/] [dim]{escape(entry.etag)}[/]")
    if entry.storageclass:
        _console.print(f"[bold]Storage class:[/] {escape(entry.storageclass)}")
    if entry.visibility is not None:
        _console.print(f"[bold]Visibility:[/] {entry.visibility.value}")
    if entry.metadata:
        for name, value in sorted(entry.metadata.items()):
            _console.print(f"[bold]Metadata {escape(name)}:[/] {escape(str(value))}")

    if verbose and entry.headers:
        table = Table(title="Headers")
        table.add_column("Header", style="cyan")
        table.add_column("Value")
        for name, value in sorted(entry.headers.items()):
            table.add_row(escape(name), escape(str(value)))
        _console.print(table)


def print_written(entry: Entry) -> None:
    """
    Print a write/upload summary.

    Args:
        entry: Entry returned by the write operation
    """
    parts = [f"Wrote {escape(entry.path)}"]
    if entry.size is not None:
        parts.append(_format_bytes(entry.size))
    if entry.mimetype:
        parts.append(escape(entry.mimetype))
    if entry.visibility is not None:
        parts.append(entry.visibility.value)
    _console.print(", ".join(parts))


def print_outcome(action: str, target: str, ok: bool) -> None:
    """
    Print the result of a boolean operation (delete, copy, rename).

    Args:
        action: Past-tense verb, e.g. "Deleted"
        target: What the action applied to
        ok: Whether the adapter reported success
    """
    if ok:
        _console.print(f"{action} {escape(target)}")
    else:
        _err_console.print(f"[red]Failed:[/] {action.lower()} {escape(target)}")


def print_contents(data: bytes) -> None:
    """Write raw object bytes to stdout without any formatting."""
    typer.echo(data, nl=False)


def print_error(exc: BaseException) -> None:
    """
    Print an exception message to stderr.

    Args:
        exc: Exception raised by a command
    """
    _err_console.print(f"[red]Error:[/] {escape(str(exc))}")


def _format_timestamp(timestamp: Optional[int]) -> str:
    if timestamp is None:
        return ""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def _format_bytes(size_bytes: int) -> str:
    """
    Format byte count as human-readable string.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted string (e.g., "1.5 MB", "42 B")
    """
    if size_bytes == 0:
        return "0 B"
    elif size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f} MB"
    else:
        return f"{size_bytes / (1024 * 1024 * 1024):.1f} GB"
