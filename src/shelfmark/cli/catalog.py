"""Catalog lookup commands: search and isbn."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from typing import Annotated

import typer

from shelfmark.cli._app import (
    CATALOG_COMMANDS,
    EXIT_INVALID_INPUT,
    EXIT_NOT_FOUND,
    EXIT_UNAVAILABLE,
    SearchFormat,
)
from shelfmark.cli._context import get_runtime_context
from shelfmark.exceptions import BookNotFoundError, InvalidInputError, SourceUnavailableError
from shelfmark.models import CandidateBook
from shelfmark.ui import console, fatal_error, print_candidate_details, print_candidate_table

logger = logging.getLogger(__name__)


def candidate_to_dict(book: CandidateBook) -> dict[str, object]:
    data = asdict(book)
    data["authors"] = list(book.authors)
    return data


FormatOption = Annotated[
    SearchFormat,
    typer.Option("--format", "-f", help="Output format.", case_sensitive=False),
]


def register_catalog_commands(app: typer.Typer) -> None:
    """Register catalog commands on the app."""

    @app.command(rich_help_panel=CATALOG_COMMANDS)
    def search(
        ctx: typer.Context,
        query: Annotated[str, typer.Argument(help="Title or keywords.")] = "",
        author: Annotated[
            str | None,
            typer.Option("--author", "-a", help="Author name to narrow the search."),
        ] = None,
        limit: Annotated[
            int,
            typer.Option("--limit", "-n", min=1, help="Maximum results to show."),
        ] = 20,
        output_format: FormatOption = SearchFormat.table,
    ) -> None:
        """🔎 Search Google Books and Open Library.

        Results from both catalogs are merged by ISBN and ranked by how well
        the title and authors match.

        [bold]Examples:[/]
          shelfmark search "the great gatsby" -a fitzgerald
          shelfmark search dune --format json
        """
        runtime = get_runtime_context(ctx.obj)
        try:
            results = runtime.resolver.resolve(query, author)
        except InvalidInputError as e:
            fatal_error(str(e))
            raise typer.Exit(EXIT_INVALID_INPUT) from e
        except SourceUnavailableError as e:
            fatal_error(str(e), "Try again in a moment")
            raise typer.Exit(EXIT_UNAVAILABLE) from e

        shown = results[:limit]
        if output_format is SearchFormat.json:
            console.print_json(json.dumps([candidate_to_dict(b) for b in shown]))
            return
        print_candidate_table(shown, title=f"Results for '{query or author}'")
        if len(results) > limit:
            console.print(f"[dim]{len(results) - limit} more not shown (use --limit)[/]")

    @app.command(rich_help_panel=CATALOG_COMMANDS)
    def isbn(
        ctx: typer.Context,
        identifier: Annotated[str, typer.Argument(help="ISBN-10 or ISBN-13, hyphens allowed.")],
        output_format: FormatOption = SearchFormat.table,
    ) -> None:
        """📖 Look up one book by ISBN.

        [bold]Examples:[/]
          shelfmark isbn 978-0-06-231611-0
          shelfmark isbn 0306406152 --format json
        """
        runtime = get_runtime_context(ctx.obj)
        try:
            book = runtime.resolver.resolve_by_identifier(identifier)
        except InvalidInputError as e:
            fatal_error(str(e), "ISBNs have 10 or 13 digits")
            raise typer.Exit(EXIT_INVALID_INPUT) from e
        except BookNotFoundError as e:
            fatal_error(str(e), "Try a free-text search: shelfmark search \"<title>\"")
            raise typer.Exit(EXIT_NOT_FOUND) from e
        except SourceUnavailableError as e:
            fatal_error(str(e), "Try again in a moment")
            raise typer.Exit(EXIT_UNAVAILABLE) from e

        if output_format is SearchFormat.json:
            console.print_json(json.dumps(candidate_to_dict(book)))
            return
        print_candidate_details(book)
