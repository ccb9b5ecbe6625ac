from __future__ import annotations

from datetime import date, datetime
from typing import Iterator


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_date_list(value: str) -> frozenset[date]:
    """Parse a comma separated list of ISO dates (used for HOLIDAYS settings)."""
    return frozenset(parse_iso_date(p.strip()) for p in (value or "").split(",") if p.strip())


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every date in [start, end]."""
    for ordinal in range(start.toordinal(), end.toordinal() + 1):
        yield date.fromordinal(ordinal)
