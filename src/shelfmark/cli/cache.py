"""Cover cache maintenance commands."""

from __future__ import annotations

from typing import Annotated

import typer

from shelfmark.cli._context import get_runtime_context
from shelfmark.ui import console, format_file_size, print_success


def register_cache_commands(app: typer.Typer) -> None:
    """Register cache commands on the cache sub-app."""

    @app.command("size")
    def cache_size(ctx: typer.Context) -> None:
        """Show disk space used by cached covers."""
        cache = get_runtime_context(ctx.obj).cover_cache
        console.print(f"{format_file_size(cache.size_bytes())} in [dim]{cache.directory}[/]")

    @app.command("clear")
    def cache_clear(
        ctx: typer.Context,
        yes: Annotated[
            bool,
            typer.Option("--yes", "-y", help="Don't ask for confirmation."),
        ] = False,
    ) -> None:
        """Remove every cached cover."""
        cache = get_runtime_context(ctx.obj).cover_cache
        if not yes:
            typer.confirm(f"Delete cached covers in {cache.directory}?", abort=True)
        removed = cache.clear()
        print_success(f"Removed {removed} cached covers")
