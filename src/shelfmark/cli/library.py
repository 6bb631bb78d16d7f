"""Reading analytics command."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer

from shelfmark.cli._app import EXIT_INVALID_INPUT, LIBRARY_COMMANDS
from shelfmark.cli._context import get_runtime_context
from shelfmark.exceptions import SnapshotError
from shelfmark.snapshot import load_snapshot
from shelfmark.ui import fatal_error, print_analytics

logger = logging.getLogger(__name__)


def register_library_commands(app: typer.Typer) -> None:
    """Register library commands on the app."""

    @app.command(rich_help_panel=LIBRARY_COMMANDS)
    def stats(
        ctx: typer.Context,
        snapshot_file: Annotated[
            Path,
            typer.Argument(help="Library snapshot (YAML or JSON).", metavar="SNAPSHOT"),
        ],
        on_date: Annotated[
            datetime | None,
            typer.Option(
                "--date",
                "-d",
                formats=["%Y-%m-%d"],
                help="Compute as of this day instead of today.",
            ),
        ] = None,
    ) -> None:
        """📊 Streaks, goals, pace and challenge for a library snapshot.

        [bold]Examples:[/]
          shelfmark stats library.yaml
          shelfmark stats library.json --date 2026-03-31
        """
        runtime = get_runtime_context(ctx.obj)
        try:
            snapshot = load_snapshot(snapshot_file)
        except SnapshotError as e:
            fatal_error(str(e))
            for err in e.errors[:10]:
                fatal_error(err)
            raise typer.Exit(EXIT_INVALID_INPUT) from e

        # End of the chosen day so everything logged that day counts
        now = on_date.replace(hour=23, minute=59, second=59) if on_date else None
        print_analytics(runtime.engine.compute(snapshot, now=now))
