"""Locality matching — does an alert concern a given home locality."""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum

from src.core.types import Alert


class RelevancePolicy(StrEnum):
    """What an absent home locality means for a caller.

    DISPLAY shows everything until a home is configured; NOTIFICATION never
    pushes anything until a home is configured.
    """

    DISPLAY = "DISPLAY"
    NOTIFICATION = "NOTIFICATION"


def normalize_locality(name: str) -> str:
    """Trim and case-fold a locality or area name."""
    return name.strip().casefold()


def names_overlap(a: str, b: str) -> bool:
    """Bidirectional substring containment on normalized names.

    A blank name is contained in every name, so it overlaps everything.
    """
    na = normalize_locality(a)
    nb = normalize_locality(b)
    return na in nb or nb in na


def is_relevant(alert: Alert, home_locality: str) -> bool:
    """True iff *home_locality* overlaps any of the alert's localities."""
    return any(names_overlap(home_locality, loc) for loc in alert.localities)


def filter_relevant(
    alerts: Iterable[Alert],
    home_locality: str | None,
    policy: RelevancePolicy,
) -> list[Alert]:
    """Return the alerts relevant to *home_locality* under *policy*."""
    if home_locality is None or not home_locality.strip():
        return list(alerts) if policy == RelevancePolicy.DISPLAY else []
    return [a for a in alerts if is_relevant(a, home_locality)]
