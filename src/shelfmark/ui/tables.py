"""Tables and panels for search results and reading analytics."""

from __future__ import annotations

from collections.abc import Sequence

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from shelfmark.analytics import DerivedAnalytics
from shelfmark.analytics.notes import format_note
from shelfmark.models import CandidateBook
from shelfmark.ui.core import console
from shelfmark.ui.messages import format_duration


def _truncate(text: str | None, width: int) -> str:
    if not text:
        return "-"
    return text if len(text) <= width else text[: width - 1] + "…"


def print_candidate_table(candidates: Sequence[CandidateBook], title: str = "Results") -> None:
    """Print ranked candidates.

    Example:
        >>> print_candidate_table(resolver.resolve("project hail mary"))
        ┏━━━┳━━━━━━━━━━━━━━━━━━┳━━━━━━━━━━━┳━━━━━━━━━━━━━━━┳━━━━━━━┳━━━━━━━━━━━━━━┓
        ┃ # ┃ Title            ┃ Author    ┃ ISBN          ┃ Pages ┃ Source       ┃
        ┡━━━╇━━━━━━━━━━━━━━━━━━╇━━━━━━━━━━━╇━━━━━━━━━━━━━━━╇━━━━━━━╇━━━━━━━━━━━━━━┩
        │ 1 │ Project Hail Mary│ Andy Weir │ 9780593135204 │ 496   │ google_books │
        └───┴──────────────────┴───────────┴───────────────┴───────┴──────────────┘
    """
    if not candidates:
        console.print("[dim]No books found[/]")
        return

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("#", style="dim", width=3)
    table.add_column("Title")
    table.add_column("Author", style="author")
    table.add_column("ISBN", style="isbn")
    table.add_column("Pages", justify="right")
    table.add_column("Source", style="source")

    for i, book in enumerate(candidates, 1):
        table.add_row(
            str(i),
            _truncate(book.title, 50),
            _truncate(book.authors_display, 30),
            book.identifier,
            str(book.page_count) if book.page_count is not None else "-",
            book.source or "-",
        )
    console.print(table)


def print_candidate_details(book: CandidateBook) -> None:
    lines = [
        f"[title]{book.title}[/]",
        f"[author]{book.authors_display}[/]",
        "",
        f"[dim]ISBN:[/] [isbn]{book.identifier}[/]",
    ]
    if book.publisher:
        lines.append(f"[dim]Publisher:[/] {book.publisher}")
    if book.published_date:
        lines.append(f"[dim]Published:[/] {book.published_date}")
    if book.page_count is not None:
        lines.append(f"[dim]Pages:[/] {book.page_count}")
    if book.cover_url:
        lines.append(f"[dim]Cover:[/] {book.cover_url}")
    if book.description:
        lines.extend(["", _truncate(book.description, 400)])
    console.print(Panel("\n".join(lines), title=book.source or "Book", border_style="cyan"))


def print_analytics(result: DerivedAnalytics) -> None:
    """Print the reading dashboard for one analytics result."""
    streak = Table.grid(padding=(0, 2))
    streak.add_column(style="dim")
    streak.add_column()
    streak.add_row("Current streak", f"[streak]{result.current_streak_days} days[/]")
    streak.add_row("Longest streak", f"{result.longest_streak_days} days")
    streak.add_row("Read today", "[success]yes[/]" if result.has_read_today else "[warning]no[/]")
    streak.add_row("Freeze available", "yes" if result.freeze_available else "no")
    for label, goal in (("Daily goal", result.daily_goal), ("Weekly goal", result.weekly_goal)):
        if goal is not None:
            mark = " [success]✓[/]" if goal.reached else ""
            streak.add_row(label, f"{goal.pages_read}/{goal.goal} pages{mark}")
    if result.challenge is not None:
        c = result.challenge
        if c.ahead_by > 0:
            schedule = f"[success]{c.ahead_by} ahead[/]"
        elif c.ahead_by < 0:
            schedule = f"[warning]{-c.ahead_by} behind[/]"
        else:
            schedule = "on schedule"
        streak.add_row(f"{c.year} challenge", f"{c.books_read}/{c.goal} books ({schedule})")
    console.print(
        Panel(streak, title=f"Reading on {result.today.isoformat()}", border_style="cyan")
    )

    if result.quote_of_the_day is not None:
        console.print(
            Panel(
                Text(format_note(result.quote_of_the_day), style="italic"),
                title="Quote of the Day",
                border_style="dim",
            )
        )

    if result.book_paces:
        table = Table(title="Currently Reading", show_header=True, header_style="bold")
        table.add_column("Title")
        table.add_column("Pages/day", justify="right")
        table.add_column("Days left", justify="right")
        table.add_column("Finish by")
        for pace in result.book_paces:
            table.add_row(
                _truncate(pace.title, 50),
                f"{pace.pages_per_day:.1f}" if pace.pages_per_day is not None else "-",
                str(pace.days_remaining) if pace.days_remaining is not None else "-",
                pace.estimated_completion.isoformat() if pace.estimated_completion else "-",
            )
        console.print(table)

    activity = Table(title="Last 7 Days", show_header=True, header_style="bold")
    for day in result.weekly_activity:
        activity.add_column(day.day.strftime("%a"), justify="right")
    activity.add_row(*(str(day.pages) for day in result.weekly_activity))
    console.print(activity)

    life = result.lifetime
    summary = Table.grid(padding=(0, 2))
    summary.add_column(style="dim")
    summary.add_column()
    summary.add_row("Books read", str(life.total_books_read))
    summary.add_row("Pages read", str(life.total_pages_read))
    if life.average_rating is not None:
        summary.add_row("Average rating", f"{life.average_rating:.1f} / 5")
    if life.average_days_per_book is not None:
        summary.add_row("Days per book", f"{life.average_days_per_book:.1f}")
    if life.average_pages_per_day is not None:
        summary.add_row("Pages per reading day", f"{life.average_pages_per_day:.1f}")
    if result.total_reading_time:
        summary.add_row("Time reading", format_duration(result.total_reading_time))
    if result.pages_per_hour is not None:
        summary.add_row("Pages per hour", f"{result.pages_per_hour:.1f}")
    console.print(Panel(summary, title="Lifetime", border_style="dim"))
