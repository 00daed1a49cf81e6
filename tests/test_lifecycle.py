"""
Tests for the Lifecycle Record Builder and record serialization.

Usage:
    pytest tests/test_lifecycle.py -v
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from qap.assignment import AssignmentRecord
from qap.catalog import CriteriaGroup, MQPSpecification, VisualELSpecification
from qap.lifecycle import (
    HeaderValidationError,
    LifecycleRecordBuilder,
    QAPHeader,
    QAPRecord,
    QAPStatus,
    SUBMISSION_ACTION,
)
from qap.reconciliation import MatchDecision, SpecificationItem


T0 = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Returns T0, then advances one hour per call."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + timedelta(hours=1)
        return current


def make_header(**overrides) -> QAPHeader:
    fields = dict(
        customer_name="jmr",
        project_name="Solar Park 7",
        order_quantity=50,
        product_type="Dual Glass M10 Topcon",
        plant="P4",
    )
    fields.update(overrides)
    return QAPHeader(**fields)


def make_items():
    return [
        SpecificationItem(
            1,
            MQPSpecification("Final", "Module", "Pmax", "Critical", "Sun simulator", "100%", ">= nameplate"),
            MatchDecision.MATCHES,
            ">= nameplate",
        ),
        SpecificationItem(
            2,
            VisualELSpecification(CriteriaGroup.VISUAL, "Glass", "Scratch", "Minor", "desc", "<= 20mm"),
            MatchDecision.DOES_NOT_MATCH,
            "<= 10mm",
        ),
    ]


class TestQAPHeader:

    def test_complete(self):
        assert make_header().is_complete

    def test_missing_fields_in_order(self):
        header = QAPHeader(project_name="p")
        assert header.missing_fields() == ["customer_name", "order_quantity", "product_type", "plant"]

    def test_blank_strings_count_as_missing(self):
        assert make_header(plant="  ").missing_fields() == ["plant"]

    def test_zero_quantity_is_missing(self):
        assert make_header(order_quantity=0).missing_fields() == ["order_quantity"]


class TestBuildDraft:

    def setup_method(self):
        self.builder = LifecycleRecordBuilder(clock=FakeClock())

    def test_draft_fields(self):
        record = self.builder.build_draft(make_header(), make_items(), {}, actor="alice")
        assert record.status == QAPStatus.DRAFT
        assert record.current_level == 1
        assert record.submitted_at is None
        assert record.timeline == []
        assert record.level_start_times == {1: T0}
        assert record.level_end_times == {}
        assert record.created_at == T0
        assert record.last_modified_at == T0
        assert record.submitted_by == "alice"
        assert record.level_responses == {}

    def test_draft_allows_incomplete_header(self):
        record = self.builder.build_draft(QAPHeader(), make_items(), {})
        assert record.customer_name == ""
        assert record.is_draft

    def test_missing_actor_uses_default(self):
        record = self.builder.build_draft(make_header(), [], {}, actor="  ")
        assert record.submitted_by == "unknown"

    def test_items_are_copied(self):
        items = make_items()
        record = self.builder.build_draft(make_header(), items, {})
        items[1].customer_specification = "changed later"
        assert record.items[1].customer_specification == "<= 10mm"

    def test_new_records_get_distinct_ids(self):
        a = self.builder.build_draft(make_header(), [], {})
        b = self.builder.build_draft(make_header(), [], {})
        assert a.id != b.id


class TestBuildSubmission:

    def setup_method(self):
        self.builder = LifecycleRecordBuilder(clock=FakeClock())

    def test_submission_fields(self):
        assignments = {2: AssignmentRecord(quality=True)}
        record = self.builder.build_submission(make_header(), make_items(), assignments, actor="bob")
        assert record.status == QAPStatus.LEVEL_2
        assert record.current_level == 2
        assert record.submitted_at == T0
        assert len(record.timeline) == 1
        entry = record.timeline[0]
        assert entry.level == 2
        assert entry.action == SUBMISSION_ACTION == "Submitted for Level 2 review"
        assert entry.user == "bob"
        assert entry.timestamp == T0
        assert record.level_start_times == {1: T0, 2: T0}
        assert record.level_end_times == {1: T0}
        assert record.assignments[2].quality is True

    def test_missing_header_refused(self):
        with pytest.raises(HeaderValidationError) as exc:
            self.builder.build_submission(make_header(plant="", project_name=""), [], {})
        assert exc.value.missing_fields == ["project_name", "plant"]
        assert isinstance(exc.value, ValueError)


class TestEditExisting:

    def test_identity_preserved_across_rebuilds(self):
        builder = LifecycleRecordBuilder(clock=FakeClock())
        original = builder.build_draft(make_header(), make_items(), {})

        current = original
        for build in (builder.build_draft, builder.build_submission, builder.build_draft):
            current = build(make_header(), make_items(), {}, existing=current)
            assert current.id == original.id
            assert current.created_at == original.created_at == T0
            assert current.last_modified_at > original.created_at


class TestRecordSerialization:

    def test_json_round_trip(self):
        builder = LifecycleRecordBuilder(clock=FakeClock())
        record = builder.build_submission(
            make_header(), make_items(), {2: AssignmentRecord(technical=True)}, actor="bob",
        )
        restored = QAPRecord.from_dict(json.loads(json.dumps(record.to_dict())))
        assert restored == record

    def test_dict_layout(self):
        builder = LifecycleRecordBuilder(clock=FakeClock())
        data = builder.build_draft(make_header(), make_items(), {}).to_dict()
        assert data["status"] == "draft"
        assert data["submitted_at"] is None
        assert data["items"][1]["match"] == "no"
        assert data["level_start_times"] == {1: T0.isoformat()}

    def test_missing_field_is_value_error(self):
        with pytest.raises(ValueError, match="missing field"):
            QAPRecord.from_dict({"id": "x"})

    def test_group_views(self):
        builder = LifecycleRecordBuilder(clock=FakeClock())
        record = builder.build_draft(make_header(), make_items(), {})
        assert [i.sno for i in record.mqp_items] == [1]
        assert [i.sno for i in record.visual_el_items] == [2]
        assert record.mismatch_count == 1
