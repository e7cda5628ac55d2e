"""Tests for the attribution analyzer."""
import pytest

from analytics.attribution import AttributionAnalyzer
from models.entities import AttributionTouch, Opportunity, parse_rows


@pytest.fixture
def report(opportunity_rows):
    return AttributionAnalyzer().analyze(parse_rows(Opportunity, opportunity_rows))


class TestAttributionAnalyzer:
    def test_first_touch(self, report):
        assert report["first_touch_attribution"] == [
            {"source": "google", "count": 2, "value": 3500, "won": 1},
        ]

    def test_last_touch_ties_keep_first_seen_order(self, report):
        assert report["last_touch_attribution"] == [
            {"source": "facebook", "count": 1, "value": 1000, "won": 0},
            {"source": "google", "count": 1, "value": 2500, "won": 1},
        ]

    def test_all_touches_credit_full_value(self, report):
        assert report["utm_sources"] == [
            {"source": "google", "count": 2, "value": 3500},
            {"source": "facebook", "count": 1, "value": 1000},
            {"source": "Direct", "count": 1, "value": 500},
        ]
        assert report["mediums"] == [
            {"medium": "cpc", "count": 2, "value": 3500},
            {"medium": "social", "count": 1, "value": 1000},
            {"medium": "email", "count": 1, "value": 500},
        ]

    def test_first_flagged_touch_wins(self):
        opp = Opportunity(status="won", monetary_value=10, attributions=[
            AttributionTouch(utm_source="a", is_first=True),
            AttributionTouch(utm_source="b", is_first=True),
        ])
        report = AttributionAnalyzer().analyze([opp])
        assert report["first_touch_attribution"] == [
            {"source": "a", "count": 1, "value": 10, "won": 1},
        ]
        assert report["last_touch_attribution"] == []
        assert report["total_opportunities"] == 1

    def test_no_touches(self):
        report = AttributionAnalyzer().analyze([Opportunity(monetary_value=100)])
        assert report["utm_sources"] == []
        assert report["mediums"] == []
