"""App configuration, callbacks, and shared types for CLI.

This module contains the Typer application factories, the main callback,
and the shared enums used across commands.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer

from shelfmark.cli._context import RuntimeContext
from shelfmark.exceptions import ConfigurationError
from shelfmark.ui import console, fatal_error

logger = logging.getLogger(__name__)

# =============================================================================
# Help Panel Names
# =============================================================================

CATALOG_COMMANDS = "Catalog"
LIBRARY_COMMANDS = "Library"
MAINTENANCE_COMMANDS = "Maintenance"

# =============================================================================
# Exit Codes
# =============================================================================

EXIT_UNAVAILABLE = 1
EXIT_INVALID_INPUT = 2
EXIT_NOT_FOUND = 3

# =============================================================================
# Shared Enums
# =============================================================================


class SearchFormat(str, Enum):
    """Search output format options."""

    table = "table"
    json = "json"


# =============================================================================
# Version Callback
# =============================================================================


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from shelfmark import __version__

        console.print(f"shelfmark {__version__}")
        raise typer.Exit()


# =============================================================================
# App Factory
# =============================================================================

MAIN_EPILOG = """
[bold cyan]Examples:[/]
  shelfmark search "project hail mary"           [dim]# Free-text search[/]
  shelfmark search "dune" --author herbert        [dim]# Narrow by author[/]
  shelfmark isbn 978-0-06-231611-0                [dim]# Direct ISBN lookup[/]
  shelfmark stats library.yaml                    [dim]# Streaks, goals, pace[/]
"""


def make_app() -> typer.Typer:
    """Create and configure the main Typer application."""
    return typer.Typer(
        name="shelfmark",
        help="Book metadata lookup and reading analytics",
        epilog=MAIN_EPILOG,
        rich_markup_mode="rich",
        pretty_exceptions_enable=True,
        pretty_exceptions_show_locals=False,
        no_args_is_help=True,
        add_completion=False,
        context_settings={"help_option_names": ["-h", "--help"]},
    )


CACHE_EPILOG = """
[bold cyan]Common Tasks:[/]
  shelfmark cache size     [dim]# Disk space used by cached covers[/]
  shelfmark cache clear    [dim]# Remove every cached cover[/]
"""


def make_cache_app() -> typer.Typer:
    """Create the cover cache sub-app."""
    return typer.Typer(
        name="cache",
        help="Manage the cover image cache",
        epilog=CACHE_EPILOG,
        rich_markup_mode="rich",
        no_args_is_help=True,
    )


# =============================================================================
# Settings / Logging Setup Helper
# =============================================================================


def setup_runtime(verbose: bool, config_path: Path | None) -> RuntimeContext:
    """Load settings, configure logging, and build the runtime context.

    An explicit --config must exist; otherwise the default config file is
    used only when present. A .env next to the config file (or in the
    working directory) is loaded first.
    """
    from shelfmark.config import default_env_file, load_settings
    from shelfmark.logging_setup import default_log_file, setup_logging
    from shelfmark.paths import default_config_file

    if config_path is None:
        default = default_config_file()
        config_path = default if default.is_file() else None
    elif not config_path.is_file():
        raise ConfigurationError(f"Config file not found: {config_path}", config_file=config_path)

    env_file = default_env_file(config_path)
    settings = load_settings(config_path, env_file=env_file)
    log_level = "DEBUG" if verbose else settings.app.log_level
    setup_logging(
        log_level=log_level,
        log_file=default_log_file() if settings.app.log_to_file else None,
        rich_console=True,
        quiet_console=not verbose,
    )
    if config_path is not None:
        logger.debug("Loaded config from %s", config_path)
    if env_file is not None:
        logger.debug("Loaded environment from %s", env_file)
    return RuntimeContext(settings=settings, config_path=config_path, verbose=verbose)


# =============================================================================
# Main Callback Factory
# =============================================================================


def create_main_callback(app: typer.Typer) -> None:
    """Register the main callback on the app."""

    @app.callback(invoke_without_command=True)
    def main_callback(
        ctx: typer.Context,
        version: Annotated[
            bool,
            typer.Option(
                "--version",
                "-V",
                callback=version_callback,
                is_eager=True,
                help="Show version and exit.",
            ),
        ] = False,
        verbose: Annotated[
            bool,
            typer.Option(
                "--verbose",
                "-v",
                help="Enable verbose (DEBUG) logging.",
            ),
        ] = False,
        config: Annotated[
            Path | None,
            typer.Option(
                "--config",
                "-c",
                help="Path to config.yaml.",
                exists=False,
            ),
        ] = None,
    ) -> None:
        """Look up books and track your reading.

        [cyan]Google Books → Open Library → ranked results[/]
        """
        try:
            ctx.obj = setup_runtime(verbose, config)
        except ConfigurationError as e:
            fatal_error(str(e), "Check the config file or SHELFMARK_*/GOOGLE_BOOKS_* variables")
            raise typer.Exit(EXIT_INVALID_INPUT) from e
