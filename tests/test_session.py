"""
Tests for the QAP editing session state machine.

Coverage:
- Stage transitions and precondition failures
- Draft and submission hand-off to the save collaborator
- Edit mode: identity preservation and loaded assignments
- End-to-end scenario: one MQP row matched, one Visual row routed to quality

Usage:
    pytest tests/test_session.py -v
"""

from datetime import datetime, timedelta, timezone

import pytest

from qap.assignment import Department, UnknownAssignmentError
from qap.catalog import (
    CriteriaGroup, MQPSpecification, VisualELSpecification, SpecificationCatalog,
)
from qap.lifecycle import (
    HeaderValidationError,
    LifecycleRecordBuilder,
    QAPHeader,
    QAPSession,
    QAPStatus,
    WorkflowStage,
    WorkflowStageError,
)
from qap.reconciliation import ItemNotFoundError, MatchDecision


# ============================================================================
# TEST HELPERS
# ============================================================================

def make_catalog() -> SpecificationCatalog:
    return SpecificationCatalog(
        mqp=[MQPSpecification(
            "Final", "Module", "Insulation resistance", "Critical",
            "Hi-pot tester", "100%", ">= 40 MOhm.m2 at 1500V DC",
        )],
        visual_el=[VisualELSpecification(
            CriteriaGroup.VISUAL, "Glass", "Scratch", "Minor",
            "Surface scratch on front glass", "Length <= 20mm, max 2 per module",
        )],
    )


def make_header() -> dict:
    return dict(
        customer_name="cmk",
        project_name="Rooftop 12",
        order_quantity=12.5,
        product_type="M10 Transparent Perc",
        plant="P2",
    )


class Clock:
    def __init__(self):
        self.now = datetime(2026, 5, 4, 8, 0, tzinfo=timezone.utc)

    def __call__(self):
        self.now += timedelta(minutes=5)
        return self.now


def make_session(**kwargs) -> QAPSession:
    kwargs.setdefault("builder", LifecycleRecordBuilder(clock=Clock()))
    session = QAPSession.start_new(make_catalog(), 1, **kwargs)
    session.update_header(**make_header())
    return session


# ============================================================================
# SCENARIO
# ============================================================================

class TestEndToEnd:

    def test_match_mismatch_assign_submit(self):
        saved = []
        session = make_session(on_save=saved.append)

        mqp = session.set_match_decision(0, MatchDecision.MATCHES)
        assert mqp.customer_specification == mqp.baseline_specification

        session.set_match_decision(1, MatchDecision.DOES_NOT_MATCH)
        assignments = session.enter_assignment_stage()
        assert list(assignments) == [2]
        assert assignments[2].to_dict() == {"production": False, "quality": False, "technical": False}

        session.toggle_department(2, Department.QUALITY, True)
        record = session.submit(actor="qa.lead")

        assert record.status == QAPStatus.LEVEL_2
        assert {sno: rec.to_dict() for sno, rec in record.assignments.items()} == {
            2: {"production": False, "quality": True, "technical": False},
        }
        assert len(record.items) == 2
        assert len(record.timeline) == 1
        assert session.stage == WorkflowStage.SUBMITTED
        assert saved == [record]
        assert session.record is record


# ============================================================================
# STAGES
# ============================================================================

class TestStages:

    def setup_method(self):
        self.session = make_session()

    def test_initial_stage(self):
        assert self.session.stage == WorkflowStage.REVIEWING
        assert not self.session.is_editing

    def test_toggle_before_assignment_stage(self):
        with pytest.raises(WorkflowStageError) as exc:
            self.session.toggle_department(2, Department.QUALITY, True)
        assert exc.value.stage == WorkflowStage.REVIEWING

    def test_submit_from_review_refused(self):
        with pytest.raises(WorkflowStageError):
            self.session.submit(actor="a")
        assert self.session.stage == WorkflowStage.REVIEWING

    def test_decisions_locked_while_assigning(self):
        self.session.enter_assignment_stage()
        with pytest.raises(WorkflowStageError):
            self.session.set_match_decision(0, MatchDecision.MATCHES)
        with pytest.raises(WorkflowStageError):
            self.session.edit_customer_specification(0, "x")

    def test_cannot_enter_assignment_twice(self):
        self.session.enter_assignment_stage()
        with pytest.raises(WorkflowStageError):
            self.session.enter_assignment_stage()

    def test_return_to_review_only_from_assigning(self):
        with pytest.raises(WorkflowStageError):
            self.session.return_to_review()

    def test_reentry_rebuilds_map(self):
        self.session.set_match_decision(1, MatchDecision.DOES_NOT_MATCH)
        self.session.enter_assignment_stage()
        self.session.toggle_department(2, Department.TECHNICAL, True)
        self.session.return_to_review()

        self.session.set_match_decision(1, MatchDecision.MATCHES)
        self.session.set_match_decision(0, MatchDecision.DOES_NOT_MATCH)
        assignments = self.session.enter_assignment_stage()
        assert list(assignments) == [1]
        assert not assignments[1].is_assigned

    def test_toggle_unknown_sno_in_assigning(self):
        self.session.enter_assignment_stage()
        with pytest.raises(UnknownAssignmentError):
            self.session.toggle_department(1, Department.QUALITY, True)

    def test_assignment_view(self):
        self.session.set_match_decision(1, MatchDecision.DOES_NOT_MATCH)
        self.session.enter_assignment_stage()
        view = self.session.assignment_view()
        assert len(view) == 1
        item, record = view[0]
        assert item.sno == 2
        assert item.sub_criteria == "Glass"
        assert not record.is_assigned

    def test_unknown_item(self):
        with pytest.raises(ItemNotFoundError):
            self.session.set_match_decision_for(42, MatchDecision.MATCHES)

    def test_unknown_header_field(self):
        with pytest.raises(ValueError, match="colour"):
            self.session.update_header(colour="red")

    def test_finalized_session_is_frozen(self):
        self.session.save_draft(actor="a")
        with pytest.raises(WorkflowStageError):
            self.session.set_match_decision(0, MatchDecision.MATCHES)
        with pytest.raises(WorkflowStageError):
            self.session.update_header(plant="P5")
        with pytest.raises(WorkflowStageError):
            self.session.save_draft(actor="a")


# ============================================================================
# FINALIZATION
# ============================================================================

class TestFinalization:

    def test_draft_from_review_has_no_assignments(self):
        session = make_session()
        session.set_match_decision(1, MatchDecision.DOES_NOT_MATCH)
        record = session.save_draft(actor="a")
        assert record.status == QAPStatus.DRAFT
        assert record.current_level == 1
        assert record.submitted_at is None
        assert record.assignments == {}
        assert session.stage == WorkflowStage.SAVED_AS_DRAFT

    def test_draft_from_assigning_keeps_assignments(self):
        session = make_session()
        session.set_match_decision(1, MatchDecision.DOES_NOT_MATCH)
        session.enter_assignment_stage()
        session.toggle_department(2, Department.PRODUCTION, True)
        record = session.save_draft()
        assert record.assignments[2].production is True
        assert record.current_level == 1

    def test_draft_after_return_to_review_drops_resolved_mismatch(self):
        session = make_session()
        session.set_match_decision_for(2, MatchDecision.DOES_NOT_MATCH)
        session.enter_assignment_stage()
        session.return_to_review()
        session.set_match_decision_for(2, MatchDecision.MATCHES)
        record = session.save_draft(actor="a")
        assert record.assignments == {}

    def test_draft_after_return_to_review_keeps_open_mismatch(self):
        session = make_session()
        session.set_match_decision_for(2, MatchDecision.DOES_NOT_MATCH)
        session.enter_assignment_stage()
        session.toggle_department(2, Department.TECHNICAL, True)
        session.return_to_review()
        record = session.save_draft(actor="a")
        assert record.assignments[2].technical is True

    def test_draft_with_empty_header(self):
        session = QAPSession.start_new(make_catalog(), 1)
        record = session.save_draft()
        assert record.header == QAPHeader()

    def test_incomplete_header_refuses_submission_but_allows_draft(self):
        saved = []
        session = make_session(on_save=saved.append)
        session.update_header(customer_name="", order_quantity=0)
        session.enter_assignment_stage()

        with pytest.raises(HeaderValidationError) as exc:
            session.submit(actor="a")
        assert exc.value.missing_fields == ["customer_name", "order_quantity"]
        assert session.stage == WorkflowStage.ASSIGNING
        assert saved == []

        record = session.save_draft(actor="a")
        assert record.is_draft
        assert saved == [record]

    def test_call_level_on_save_overrides_default(self):
        default, explicit = [], []
        session = make_session(on_save=default.append)
        session.enter_assignment_stage()
        record = session.submit(actor="a", on_save=explicit.append)
        assert explicit == [record]
        assert default == []

    def test_zero_mismatch_must_pass_through_assignment(self):
        session = make_session()
        session.set_match_decision(0, MatchDecision.MATCHES)
        session.set_match_decision(1, MatchDecision.MATCHES)
        with pytest.raises(WorkflowStageError):
            session.submit()
        assert session.enter_assignment_stage() == {}
        assert session.submit().status == QAPStatus.LEVEL_2


class TestDirectSubmit:

    def test_zero_mismatch_direct_submit(self):
        session = make_session(allow_direct_submit=True)
        session.set_match_decision(0, MatchDecision.MATCHES)
        record = session.submit(actor="a")
        assert record.status == QAPStatus.LEVEL_2
        assert record.assignments == {}

    def test_direct_submit_refused_with_mismatches(self):
        session = make_session(allow_direct_submit=True)
        session.set_match_decision(1, MatchDecision.DOES_NOT_MATCH)
        with pytest.raises(WorkflowStageError):
            session.submit(actor="a")


# ============================================================================
# EDIT MODE
# ============================================================================

class TestEditMode:

    def _submitted_record(self):
        session = make_session()
        session.set_match_decision(1, MatchDecision.DOES_NOT_MATCH)
        session.edit_customer_specification(1, "Length <= 10mm")
        session.enter_assignment_stage()
        session.toggle_department(2, Department.QUALITY, True)
        return session.submit(actor="a")

    def test_state_seeded_from_record(self):
        record = self._submitted_record()
        session = QAPSession.edit(record)
        assert session.is_editing
        assert session.stage == WorkflowStage.REVIEWING
        assert session.header.project_name == "Rooftop 12"
        assert session.reconciliation.find(2).customer_specification == "Length <= 10mm"

    def test_loaded_assignments_kept_on_entry(self):
        session = QAPSession.edit(self._submitted_record())
        assignments = session.enter_assignment_stage()
        assert assignments[2].quality is True

    def test_resolved_mismatch_not_carried_into_submission(self):
        session = QAPSession.edit(self._submitted_record())
        session.set_match_decision_for(2, MatchDecision.MATCHES)
        assert session.enter_assignment_stage() == {}
        assert session.submit(actor="b").assignments == {}

    def test_identity_preserved_through_edits(self):
        original = self._submitted_record()
        record = original
        for finalize in ("save_draft", "submit", "save_draft"):
            session = QAPSession.edit(record, builder=LifecycleRecordBuilder(clock=Clock()))
            if finalize == "submit":
                session.enter_assignment_stage()
            record = getattr(session, finalize)(actor="b")
            assert record.id == original.id
            assert record.created_at == original.created_at

    def test_editing_does_not_mutate_source_record(self):
        record = self._submitted_record()
        session = QAPSession.edit(record)
        session.set_match_decision_for(2, MatchDecision.MATCHES)
        assert record.items[1].match == MatchDecision.DOES_NOT_MATCH
