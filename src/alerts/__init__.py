"""Alert pipeline — countdown lookup, normalization, relevance, dedup."""

from src.alerts.countdown import AREA_COUNTDOWN, AreaCountdownTable, shelter_countdown
from src.alerts.dedup import HomeAlertCallback, NotificationTrigger, diff_relevant
from src.alerts.normalizer import normalize, normalize_payload
from src.alerts.relevance import (
    RelevancePolicy,
    filter_relevant,
    is_relevant,
    names_overlap,
    normalize_locality,
)

__all__ = [
    "AREA_COUNTDOWN",
    "AreaCountdownTable",
    "HomeAlertCallback",
    "NotificationTrigger",
    "RelevancePolicy",
    "diff_relevant",
    "filter_relevant",
    "is_relevant",
    "names_overlap",
    "normalize",
    "normalize_locality",
    "normalize_payload",
    "shelter_countdown",
]
