"""Tests for boundary mapping of store rows into entities."""
from datetime import datetime, timezone

from models.entities import (
    AttributionTouch,
    Contact,
    Opportunity,
    PipelineStage,
    ShadowRecord,
    parse_rows,
    parse_timestamp,
)


class TestParseTimestamp:
    def test_zulu_suffix(self):
        assert parse_timestamp("2026-01-02T03:04:05Z") == datetime(
            2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc
        )

    def test_naive_is_utc(self):
        assert parse_timestamp("2026-01-02T00:00:00").tzinfo == timezone.utc

    def test_garbage_and_empty(self):
        assert parse_timestamp("not a date") is None
        assert parse_timestamp("") is None
        assert parse_timestamp(None) is None


class TestOpportunity:
    def test_defaults_for_missing_fields(self):
        opp = Opportunity.model_validate({"id": "o1"})
        assert opp.monetary_value == 0
        assert opp.attributions == []
        assert opp.status is None
        assert opp.contact is None

    def test_store_aliases(self):
        opp = Opportunity.model_validate({
            "id": "o1",
            "ghl_contact_id": "c9",
            "ghl_created_at": "2026-03-01T00:00:00Z",
            "monetary_value": "125.5",
            "contact": {"email": "a@x.com", "tags": None},
        })
        assert opp.contact_id == "c9"
        assert opp.created_at.year == 2026
        assert opp.monetary_value == 125.5
        assert opp.contact.tags == []

    def test_to_row_keeps_unknown_columns_and_aliases(self):
        row = Opportunity.model_validate(
            {"id": "o1", "ghl_opportunity_id": "g1", "ghl_created_at": None}
        ).to_row()
        assert row["ghl_opportunity_id"] == "g1"
        assert "ghl_created_at" in row
        assert "created_at" not in row

    def test_is_won(self):
        assert Opportunity(status="won").is_won
        assert not Opportunity(status="Won").is_won


class TestContact:
    def test_blank_text_is_missing(self):
        contact = Contact.model_validate({"email": "  ", "source": "", "tags": None})
        assert contact.email is None
        assert contact.source_label == "Unknown"
        assert contact.tags == []

    def test_qualification_tags(self):
        contact = Contact(tags=["pi-qualified", "pi-disqualified"])
        assert contact.is_qualified and contact.is_disqualified

    def test_has_name(self):
        assert Contact(last_name="Lee").has_name
        assert not Contact().has_name

    def test_null_tag_elements_are_dropped(self):
        contact = Contact.model_validate({"tags": ["pi-qualified", None, 7]})
        assert contact.tags == ["pi-qualified", "7"]
        assert contact.is_qualified

    def test_embedded_contact_tags_with_nulls(self):
        opp = Opportunity.model_validate({"contact": {"tags": [None, "vip"], "phone": 5550100}})
        assert opp.contact.tags == ["vip"]
        assert opp.contact.phone == "5550100"


class TestAttributionTouch:
    def test_fallback_labels(self):
        touch = AttributionTouch.model_validate({"isFirst": None})
        assert touch.source_label == "Direct"
        assert touch.medium_label == "Unknown"
        assert touch.is_first is False

    def test_non_string_source_and_medium(self):
        touch = AttributionTouch.model_validate({"utmSessionSource": 42, "medium": 0})
        assert touch.source_label == "42"
        assert touch.medium_label == "0"

    def test_non_dict_touches_are_dropped(self):
        opp = Opportunity.model_validate({"attributions": [{"isFirst": True}, "junk", None]})
        assert len(opp.attributions) == 1


class TestPipelineStage:
    def test_store_columns(self):
        stage = PipelineStage.model_validate(
            {"ghl_pipeline_id": "p1", "stage_id": "s1", "stage_position": "3", "stage_name": None}
        )
        assert stage.pipeline_id == "p1"
        assert stage.stage_position == 3
        assert stage.stage_name == "Unknown"


class TestShadowRecord:
    def test_synced_requires_non_empty_external_id(self):
        records = parse_rows(ShadowRecord, [
            {"id": 1, "salesforce_id": "003XYZ"},
            {"id": 2, "salesforce_id": ""},
            {"id": 3},
        ])
        assert [r.is_synced for r in records] == [True, False, False]
