"""Calendar date helpers that never shift dates through a timezone."""
from __future__ import annotations

import re
from datetime import date
from typing import Iterable, Optional, Sequence, Tuple, Union

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DateLike = Union[str, date]


def _as_iso(value: DateLike) -> str:
    if isinstance(value, date):
        return value.isoformat()
    return value


def is_iso_date(value: str) -> bool:
    """Return ``True`` when ``value`` is a well formed ``YYYY-MM-DD`` date."""

    if not value or not _ISO_DATE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def format_date_only(value: Optional[DateLike]) -> str:
    """Render a stored date as ``MM/DD/YYYY``.

    Full ISO timestamps are reduced to their date part. Anything that is not
    recognisably a date is returned untouched.
    """

    if not value:
        return ""
    text = _as_iso(value)
    candidate = text.split("T")[0]
    if _ISO_DATE.match(candidate):
        year, month, day = candidate.split("-")
        return f"{month}/{day}/{year}"
    return text


def format_date_range(start: Optional[DateLike], end: Optional[DateLike]) -> str:
    if not start or not end:
        return "Loading..."
    return f"{format_date_only(start)} - {format_date_only(end)}"


def sort_date_strings(dates: Iterable[DateLike]) -> list[str]:
    # ISO dates order correctly as plain strings.
    return sorted(_as_iso(value) for value in dates)


def date_range(dates: Sequence[DateLike]) -> Optional[Tuple[str, str]]:
    if not dates:
        return None
    ordered = sort_date_strings(dates)
    return ordered[0], ordered[-1]


def find_overlapping_dates(date_lists: Sequence[Sequence[DateLike]]) -> list[str]:
    """Return the dates present in every list, sorted ascending."""

    if not date_lists:
        return []
    if len(date_lists) == 1:
        return [_as_iso(value) for value in date_lists[0]]
    common = [_as_iso(value) for value in date_lists[0]]
    for other in date_lists[1:]:
        present = {_as_iso(value) for value in other}
        common = [value for value in common if value in present]
    return sort_date_strings(common)


def ranges_overlap(
    first: Tuple[DateLike, DateLike], second: Tuple[DateLike, DateLike]
) -> Optional[Tuple[str, str]]:
    """Return the shared ``(start, end)`` span of two inclusive ranges, if any."""

    start_a, end_a = (_as_iso(value) for value in first)
    start_b, end_b = (_as_iso(value) for value in second)
    if start_a <= end_b and start_b <= end_a:
        return max(start_a, start_b), min(end_a, end_b)
    return None


def date_variants(value: date) -> Tuple[list[str], list[str]]:
    """Spellings of ``value`` that may appear in NinjaTrader output.

    Returns the full date forms and the month/day forms without a year.
    """

    year, month, day = value.year, value.month, value.day
    iso = value.isoformat()
    full = [
        iso,
        iso.replace("-", "/"),
        f"{month}/{day}/{year}",
        f"{month:02d}/{day:02d}/{year}",
        f"{day}/{month}/{year}",
        f"{day:02d}/{month:02d}/{year}",
    ]
    partial = [
        f"{month}/{day}",
        f"{month:02d}/{day:02d}",
        f"{day}/{month}",
        f"{day:02d}/{month:02d}",
    ]
    return list(dict.fromkeys(full)), list(dict.fromkeys(partial))


__all__ = [
    "date_range",
    "date_variants",
    "find_overlapping_dates",
    "format_date_only",
    "format_date_range",
    "is_iso_date",
    "ranges_overlap",
    "sort_date_strings",
]
