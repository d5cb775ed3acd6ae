"""Tests for locality relevance — bidirectional containment, caller policies."""

from __future__ import annotations

import datetime

from src.alerts.relevance import (
    RelevancePolicy,
    filter_relevant,
    is_relevant,
    names_overlap,
    normalize_locality,
)
from src.core.types import Alert

_T0 = datetime.datetime(2024, 10, 1, tzinfo=datetime.UTC)


def _alert(alert_id: str, *localities: str) -> Alert:
    return Alert(
        id=alert_id,
        title="ירי רקטות וטילים",
        localities=localities,
        observed_at=_T0,
        shelter_countdown_seconds=90,
    )


class TestNormalizeLocality:
    def test_trims_and_casefolds(self) -> None:
        assert normalize_locality("  Tel Aviv ") == "tel aviv"

    def test_hebrew_unchanged(self) -> None:
        assert normalize_locality("אשקלון") == "אשקלון"


class TestNamesOverlap:
    def test_either_direction(self) -> None:
        assert names_overlap("אשקלון", "אשקלון - דרום")
        assert names_overlap("אשקלון - דרום", "אשקלון")

    def test_case_insensitive(self) -> None:
        assert names_overlap("HAIFA", "haifa bay")

    def test_no_overlap(self) -> None:
        assert not names_overlap("חיפה", "אשדוד")

    def test_blank_is_contained_in_everything(self) -> None:
        assert names_overlap("", "חיפה")
        assert names_overlap("חיפה", "  ")


class TestIsRelevant:
    def test_home_inside_alert_locality(self) -> None:
        assert is_relevant(_alert("1", "תל אביב - יפו"), "תל אביב")

    def test_alert_locality_inside_home(self) -> None:
        assert is_relevant(_alert("1", "יפו"), "תל אביב - יפו")

    def test_any_locality_matches(self) -> None:
        assert is_relevant(_alert("1", "חיפה", "שדרות"), "שדרות")

    def test_home_whitespace_and_case(self) -> None:
        assert is_relevant(_alert("1", "Sderot"), "  sderot ")

    def test_unrelated(self) -> None:
        assert not is_relevant(_alert("1", "חיפה"), "אילת")

    def test_alert_without_localities(self) -> None:
        assert not is_relevant(_alert("1"), "אילת")

    def test_blank_alert_locality_is_relevant_everywhere(self) -> None:
        assert is_relevant(_alert("1", ""), "חיפה")
        assert is_relevant(_alert("1", "  "), "אילת")


class TestFilterRelevant:
    def test_display_without_home_shows_all(self) -> None:
        alerts = [_alert("1", "חיפה"), _alert("2", "אילת")]
        assert filter_relevant(alerts, None, RelevancePolicy.DISPLAY) == alerts

    def test_notification_without_home_is_empty(self) -> None:
        alerts = [_alert("1", "חיפה")]
        assert filter_relevant(alerts, None, RelevancePolicy.NOTIFICATION) == []

    def test_blank_home_counts_as_absent(self) -> None:
        alerts = [_alert("1", "חיפה")]
        assert filter_relevant(alerts, "", RelevancePolicy.DISPLAY) == alerts
        assert filter_relevant(alerts, "", RelevancePolicy.NOTIFICATION) == []
        assert filter_relevant(alerts, "   ", RelevancePolicy.NOTIFICATION) == []

    def test_home_applies_to_both_policies(self) -> None:
        alerts = [_alert("1", "חיפה"), _alert("2", "אילת")]
        for policy in RelevancePolicy:
            result = filter_relevant(alerts, "אילת", policy)
            assert [a.id for a in result] == ["2"]
