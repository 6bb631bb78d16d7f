"""shelfmark CLI built with Typer and Rich.

Commands:
- Catalog: search, isbn
- Library: stats
- cache: size, clear
"""

from __future__ import annotations

from shelfmark.cli._app import (
    EXIT_INVALID_INPUT,
    EXIT_NOT_FOUND,
    EXIT_UNAVAILABLE,
    MAINTENANCE_COMMANDS,
    SearchFormat,
    create_main_callback,
    make_app,
    make_cache_app,
)
from shelfmark.cli._context import RuntimeContext, get_runtime_context

app = make_app()
cache_app = make_cache_app()

app.add_typer(cache_app, name="cache", rich_help_panel=MAINTENANCE_COMMANDS)

# Handles --version, --verbose, --config
create_main_callback(app)

# =============================================================================
# Register Commands
# =============================================================================

from shelfmark.cli.cache import register_cache_commands  # noqa: E402
from shelfmark.cli.catalog import register_catalog_commands  # noqa: E402
from shelfmark.cli.library import register_library_commands  # noqa: E402

register_catalog_commands(app)
register_library_commands(app)
register_cache_commands(cache_app)


def main() -> int:
    """Main entry point for the CLI."""
    try:
        app()
        return 0
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 0


__all__ = [
    "EXIT_INVALID_INPUT",
    "EXIT_NOT_FOUND",
    "EXIT_UNAVAILABLE",
    "RuntimeContext",
    "SearchFormat",
    "app",
    "cache_app",
    "get_runtime_context",
    "main",
]
