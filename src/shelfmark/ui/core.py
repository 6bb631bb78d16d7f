"""Console instances and theme for shelfmark output."""

from __future__ import annotations

from rich.console import Console
from rich.theme import Theme

SHELFMARK_THEME = Theme(
    {
        "info": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "red bold",
        "title": "bold white",
        "dim": "dim",
        "highlight": "bold magenta",
        "isbn": "yellow",
        "author": "cyan",
        "source": "magenta",
        "streak": "bold yellow",
        "hint": "dim italic",
    }
)

# Primary console for normal output
console = Console(theme=SHELFMARK_THEME, stderr=False)

# Error console for stderr output
err_console = Console(theme=SHELFMARK_THEME, stderr=True)
