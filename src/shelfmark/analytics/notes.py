"""Quotes and notes: per-book listings and the quote of the day."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime
from typing import assert_never

from shelfmark.exceptions import InvalidInputError
from shelfmark.models import BookNote, NoteType, TrackedBook


def _page_order(note: BookNote) -> tuple[bool, int]:
    return note.page_number is None, note.page_number or 0


def notes_for(
    notes: Iterable[BookNote], identifier: str, note_type: NoteType | None = None
) -> list[BookNote]:
    """Notes for one book in page order; notes without a page come last."""
    return sorted(
        (
            n
            for n in notes
            if n.book_identifier == identifier and (note_type is None or n.note_type is note_type)
        ),
        key=_page_order,
    )


def quotes_for(notes: Iterable[BookNote], identifier: str) -> list[BookNote]:
    return notes_for(notes, identifier, NoteType.QUOTE)


def quote_of_the_day(notes: Iterable[BookNote], today: date) -> BookNote | None:
    """One quote from the whole library, the same one all day.

    Quotes are put in a fixed order and the day number picks one, so each
    quote comes round in turn.
    """
    quotes = sorted(
        (n for n in notes if n.note_type is NoteType.QUOTE),
        key=lambda n: (n.book_identifier, *_page_order(n), n.text),
    )
    if not quotes:
        return None
    return quotes[today.toordinal() % len(quotes)]


def format_note(note: BookNote) -> str:
    """Single-line rendering: quotes in quotation marks, then the page if known."""
    if note.note_type is NoteType.QUOTE:
        text = f"“{note.text.strip()}”"
    elif note.note_type is NoteType.NOTE:
        text = note.text.strip()
    else:
        assert_never(note.note_type)

    if note.page_number is not None:
        return f"{text} (p. {note.page_number})"
    return text


def add_note(
    book: TrackedBook,
    text: str,
    note_type: NoteType = NoteType.NOTE,
    page_number: int | None = None,
    now: datetime | None = None,
) -> BookNote:
    """Build a note for ``book``.

    Raises:
        InvalidInputError: Empty text, or a page outside the book.
    """
    if page_number is not None and (
        page_number < 1 or (book.page_count is not None and page_number > book.page_count)
    ):
        raise InvalidInputError(
            f"Page {page_number} is not in '{book.title}'", value=book.identifier
        )
    return BookNote(
        book_identifier=book.identifier,
        text=text.strip(),
        note_type=note_type,
        page_number=page_number,
        date_created=now or datetime.now(),
    )
