"""Time-to-shelter lookup by area."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from src.alerts.relevance import names_overlap

# Seconds available to reach a protected space, by area.
_AREA_SECONDS: dict[str, int] = {
    "עוטף עזה": 15,
    "לכיש": 30,
    "מערב לכיש": 30,
    "שפלת יהודה": 45,
    "אשקלון": 30,
    "שדרות, נתיבות": 15,
    "באר שבע": 60,
    "תל אביב": 90,
    "גוש דן": 90,
    "המרכז": 90,
    "חיפה": 60,
    "הצפון": 60,
    "ירושלים": 90,
}

DEFAULT_COUNTDOWN_SECONDS = 90


class AreaCountdownTable:
    """Read-only area → seconds table with a fallback for unknown areas."""

    __slots__ = ("_areas", "_default")

    def __init__(self, areas: Mapping[str, int], default: int) -> None:
        if default < 0 or any(v < 0 for v in areas.values()):
            raise ValueError("countdown seconds must be non-negative")
        self._areas: Mapping[str, int] = MappingProxyType(dict(areas))
        self._default = default

    @property
    def areas(self) -> Mapping[str, int]:
        return self._areas

    @property
    def default(self) -> int:
        return self._default

    def lookup(self, localities: Iterable[str]) -> int:
        """Most urgent countdown across every area any locality overlaps.

        Falls back to the default when nothing matches, including when
        *localities* is empty.
        """
        matched = [
            seconds
            for loc in localities
            for area, seconds in self._areas.items()
            if names_overlap(loc, area)
        ]
        return min(matched) if matched else self._default


AREA_COUNTDOWN = AreaCountdownTable(_AREA_SECONDS, DEFAULT_COUNTDOWN_SECONDS)


def shelter_countdown(
    localities: Iterable[str],
    table: AreaCountdownTable = AREA_COUNTDOWN,
) -> int:
    """Seconds to shelter for an alert covering *localities*."""
    return table.lookup(localities)
