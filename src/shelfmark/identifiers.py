"""ISBN normalization helpers.

normalize_identifier() never fails and never validates checksums: it strips
separators so identifiers from different catalogs compare equal.
"""

from __future__ import annotations

import re

_SEPARATORS = re.compile(r"[^0-9A-Za-z]")
_ISBN10 = re.compile(r"^\d{9}[\dX]$")
_ISBN13 = re.compile(r"^\d{13}$")


def normalize_identifier(raw: str) -> str:
    """
    Strip separators from a raw identifier.

    Examples:
        "978-0-06-231611-0" -> "9780062316110"
        "0-306-40615-x"     -> "030640615X"
        "9780062316110"     -> "9780062316110"

    Args:
        raw: Identifier as typed, scanned or returned by a catalog

    Returns:
        Alphanumeric characters only. A trailing ISBN-10 check digit "x" is
        uppercased; anything else is returned as-is.
    """
    cleaned = _SEPARATORS.sub("", raw or "")
    if len(cleaned) == 10 and cleaned[-1] == "x":
        cleaned = cleaned[:-1] + "X"
    return cleaned


def is_isbn_like(value: str) -> bool:
    """True if ``value`` (already normalized) has ISBN-10 or ISBN-13 shape."""
    return bool(_ISBN10.match(value) or _ISBN13.match(value))


def isbn10_to_isbn13(isbn10: str) -> str | None:
    """Convert an ISBN-10 to its 978-prefixed ISBN-13 form.

    Returns None when the input does not have ISBN-10 shape.
    """
    isbn10 = normalize_identifier(isbn10)
    if not _ISBN10.match(isbn10):
        return None
    body = "978" + isbn10[:9]
    total = sum(int(d) * (1 if i % 2 == 0 else 3) for i, d in enumerate(body))
    check = (10 - total % 10) % 10
    return f"{body}{check}"
