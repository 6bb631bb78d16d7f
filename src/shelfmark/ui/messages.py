"""One-line status messages."""

from __future__ import annotations

from datetime import timedelta

from shelfmark.ui.core import console, err_console


def print_success(message: str) -> None:
    console.print(f"  [success]✓[/] {message}")


def print_warning(message: str) -> None:
    console.print(f"  [warning]![/] {message}")


def print_info(message: str) -> None:
    console.print(f"  [info]→[/] {message}")


def fatal_error(message: str, hint: str | None = None) -> None:
    """Print an error (and optional hint) to stderr.

    Example:
        >>> fatal_error("No book found for ISBN 9780000000000", "Try a title search")
    """
    err_console.print(f"\n[error]Error:[/] {message}")
    if hint:
        err_console.print(f"[hint]Hint: {hint}[/]")


def format_file_size(size_bytes: float | None) -> str:
    """Human-readable size like "1.5 MB"."""
    if size_bytes is None:
        return "?"
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if abs(size_bytes) < 1024:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024
    return f"{size_bytes:.1f} PB"


def format_duration(duration: timedelta) -> str:
    """Short reading time like "2h 05m" or "45m"."""
    minutes = int(duration.total_seconds()) // 60
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes:02d}m"
    return f"{minutes}m"
