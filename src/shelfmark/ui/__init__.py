"""Rich console output for the shelfmark CLI."""

from __future__ import annotations

from shelfmark.ui.core import SHELFMARK_THEME, console, err_console
from shelfmark.ui.messages import (
    fatal_error,
    format_duration,
    format_file_size,
    print_info,
    print_success,
    print_warning,
)
from shelfmark.ui.tables import (
    print_analytics,
    print_candidate_details,
    print_candidate_table,
)

__all__ = [
    "SHELFMARK_THEME",
    "console",
    "err_console",
    "fatal_error",
    "format_duration",
    "format_file_size",
    "print_analytics",
    "print_candidate_details",
    "print_candidate_table",
    "print_info",
    "print_success",
    "print_warning",
]
