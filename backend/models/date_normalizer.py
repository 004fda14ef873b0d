"""Birth date normalization.

Parses a candidate date string against an ordered list of calendar
templates and only accepts dates whose year is a plausible adult birth year.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence, Tuple


# Ordered: day-first wins over month-first for ambiguous values like 05/06/1985.
# Two-digit years pivot at 69 (69-99 -> 19xx, 00-68 -> 20xx).
BIRTH_DATE_FORMATS: Tuple[Tuple[str, str], ...] = (
    ("DD/MM/YYYY", "%d/%m/%Y"),
    ("DD-MM-YYYY", "%d-%m-%Y"),
    ("DD.MM.YYYY", "%d.%m.%Y"),
    ("MM/DD/YYYY", "%m/%d/%Y"),
    ("DD/MM/YY", "%d/%m/%y"),
    ("DD-MM-YY", "%d-%m-%y"),
)

BIRTH_YEAR_WINDOW: Tuple[int, int] = (1900, 2010)


def parse_date(candidate: str, fmt: str) -> Optional[date]:
    try:
        return datetime.strptime(candidate, fmt).date()
    except ValueError:
        return None


def parse_birth_date(
    candidate: Optional[str],
    formats: Sequence[Tuple[str, str]] = BIRTH_DATE_FORMATS,
    window: Optional[Tuple[int, int]] = BIRTH_YEAR_WINDOW,
) -> Optional[date]:
    """Return the first template parse of ``candidate`` inside ``window``.

    ``window`` is an inclusive ``(min_year, max_year)`` pair; ``None`` accepts
    any year. A template that parses to an out-of-window year does not stop
    the search, the next template is tried.
    """
    if not candidate:
        return None
    text = candidate.strip()
    for _label, fmt in formats:
        parsed = parse_date(text, fmt)
        if parsed is None:
            continue
        if window is None or window[0] <= parsed.year <= window[1]:
            return parsed
    return None


# =========================
# LOCAL TEST
# =========================

if __name__ == "__main__":
    for sample in ["05/06/1985", "13-02-1990", "01/01/2020", "12/31/1975", "3/4/85"]:
        print(sample, "->", parse_birth_date(sample))
