"""
QAP Editing Session
===================

State machine for one user editing one QAP:

    REVIEWING ──enter_assignment_stage()──> ASSIGNING ──submit()──> SUBMITTED
        │  ^                                   │
        │  └─────────return_to_review()────────┤
        │                                      │
        └──────────save_draft()────────────────┴──save_draft()──> SAVED_AS_DRAFT

Finished records are passed to the `on_save` collaborator; nothing is
persisted here.

Usage:
    session = QAPSession.start_new(load_catalog(), start_sno=1, on_save=outbox.put)
    session.update_header(customer_name="jmr", project_name="Solar Park 7", ...)
    session.set_match_decision_for(1, MatchDecision.MATCHES)
    session.enter_assignment_stage()
    session.toggle_department(14, Department.QUALITY, True)
    record = session.submit(actor="qa.lead")
"""

import copy
import logging
from enum import Enum
from typing import Callable, List, Optional, Tuple

from ..assignment.assignment_engine import AssignmentEngine
from ..assignment.assignment_models import AssignmentRecord, Department
from ..catalog.catalog_models import SpecificationCatalog
from ..reconciliation.item_models import MatchDecision, SpecificationItem
from ..reconciliation.reconciliation_engine import ReconciliationEngine
from .lifecycle_models import QAPHeader, QAPRecord
from .record_builder import LifecycleRecordBuilder

logger = logging.getLogger(__name__)

SaveCallback = Callable[[QAPRecord], None]


class WorkflowStage(str, Enum):
    REVIEWING = "reviewing"
    ASSIGNING = "assigning"
    SAVED_AS_DRAFT = "saved-as-draft"
    SUBMITTED = "submitted"


TERMINAL_STAGES = (WorkflowStage.SAVED_AS_DRAFT, WorkflowStage.SUBMITTED)


class WorkflowStageError(RuntimeError):
    """Operation not permitted in the session's current stage."""

    def __init__(self, operation: str, stage: WorkflowStage):
        self.operation = operation
        self.stage = stage
        super().__init__(f"Cannot {operation} while session is {stage.value}")


class QAPSession:
    """One editing session over a single QAP."""

    def __init__(
        self,
        reconciliation: ReconciliationEngine,
        assignment: Optional[AssignmentEngine] = None,
        header: Optional[QAPHeader] = None,
        existing: Optional[QAPRecord] = None,
        builder: Optional[LifecycleRecordBuilder] = None,
        on_save: Optional[SaveCallback] = None,
        allow_direct_submit: bool = False,
    ):
        self.reconciliation = reconciliation
        self.assignment = assignment or AssignmentEngine()
        self.header = header or QAPHeader()
        self.existing = existing
        self.builder = builder or LifecycleRecordBuilder()
        self.allow_direct_submit = allow_direct_submit
        self._on_save = on_save
        self._stage = WorkflowStage.REVIEWING
        self.record: Optional[QAPRecord] = None

    @classmethod
    def start_new(
        cls, catalog: SpecificationCatalog, start_sno: int, **kwargs,
    ) -> "QAPSession":
        """New QAP seeded from the baseline catalog."""
        return cls(ReconciliationEngine.seed(catalog, start_sno), **kwargs)

    @classmethod
    def edit(cls, record: QAPRecord, **kwargs) -> "QAPSession":
        """Edit mode: all state comes from a copy of the stored record."""
        logger.info(f"Editing QAP {record.id} ({record.status.value})", extra={"qap_id": record.id})
        return cls(
            ReconciliationEngine.from_items(copy.deepcopy(record.items)),
            assignment=AssignmentEngine(loaded=copy.deepcopy(record.assignments)),
            header=record.header,
            existing=record,
            **kwargs,
        )

    @property
    def stage(self) -> WorkflowStage:
        return self._stage

    @property
    def is_editing(self) -> bool:
        return self.existing is not None

    def _require(self, operation: str, *stages: WorkflowStage):
        if self._stage not in stages:
            raise WorkflowStageError(operation, self._stage)

    def _transition(self, stage: WorkflowStage):
        logger.info(
            f"Session stage {self._stage.value} -> {stage.value}",
            extra={"stage": stage.value},
        )
        self._stage = stage

    # =========================================================================
    # Review stage
    # =========================================================================

    def update_header(self, **fields) -> QAPHeader:
        self._require("edit header", WorkflowStage.REVIEWING, WorkflowStage.ASSIGNING)
        for name, value in fields.items():
            if not hasattr(self.header, name):
                raise ValueError(f"Unknown header field: {name}")
            setattr(self.header, name, value)
        return self.header

    def set_match_decision(self, index: int, decision: MatchDecision) -> SpecificationItem:
        self._require("set match decision", WorkflowStage.REVIEWING)
        return self.reconciliation.set_match_decision(index, decision)

    def set_match_decision_for(self, sno: int, decision: MatchDecision) -> SpecificationItem:
        self._require("set match decision", WorkflowStage.REVIEWING)
        return self.reconciliation.set_match_decision_for(sno, decision)

    def edit_customer_specification(self, index: int, text: str) -> SpecificationItem:
        self._require("edit customer specification", WorkflowStage.REVIEWING)
        return self.reconciliation.edit_customer_specification(index, text)

    def edit_customer_specification_for(self, sno: int, text: str) -> SpecificationItem:
        self._require("edit customer specification", WorkflowStage.REVIEWING)
        return self.reconciliation.edit_customer_specification_for(sno, text)

    # =========================================================================
    # Assignment stage
    # =========================================================================

    def enter_assignment_stage(self):
        self._require("enter assignment stage", WorkflowStage.REVIEWING)
        self.assignment.enter(self.reconciliation.items)
        self._transition(WorkflowStage.ASSIGNING)
        return self.assignment.assignments

    def return_to_review(self):
        self._require("return to review", WorkflowStage.ASSIGNING)
        self._transition(WorkflowStage.REVIEWING)

    def toggle_department(self, sno: int, department: Department, value: bool) -> AssignmentRecord:
        self._require("toggle department", WorkflowStage.ASSIGNING)
        return self.assignment.toggle(sno, department, value)

    def assignment_view(self) -> List[Tuple[SpecificationItem, AssignmentRecord]]:
        """Each assignment entry paired with its item, in sno order."""
        self._require("view assignments", WorkflowStage.ASSIGNING)
        items = self.reconciliation.items
        return [
            (self.assignment.lookup_item(sno, items), record)
            for sno, record in sorted(self.assignment.assignments.items())
        ]

    # =========================================================================
    # Finalization
    # =========================================================================

    def _hand_off(self, record: QAPRecord, stage: WorkflowStage, on_save: Optional[SaveCallback]):
        self.record = record
        self._transition(stage)
        callback = on_save or self._on_save
        if callback is not None:
            callback(record)
        return record

    def save_draft(self, actor: Optional[str] = None, on_save: Optional[SaveCallback] = None) -> QAPRecord:
        self._require("save draft", WorkflowStage.REVIEWING, WorkflowStage.ASSIGNING)
        # decisions may have changed since the map was last built
        self.assignment.prune(self.reconciliation.items)
        record = self.builder.build_draft(
            self.header,
            self.reconciliation.items,
            self.assignment.assignments,
            actor=actor,
            existing=self.existing,
        )
        return self._hand_off(record, WorkflowStage.SAVED_AS_DRAFT, on_save)

    def submit(self, actor: Optional[str] = None, on_save: Optional[SaveCallback] = None) -> QAPRecord:
        """
        Submit for level-2 review.

        Reachable from ASSIGNING. With allow_direct_submit, a QAP with no
        mismatches may also be submitted straight from REVIEWING.

        Raises:
            WorkflowStageError: If called from any other stage
            HeaderValidationError: If header fields are missing (stage unchanged)
        """
        if self._stage == WorkflowStage.REVIEWING and self.allow_direct_submit:
            if self.reconciliation.mismatched_items():
                raise WorkflowStageError("submit with unassigned mismatches", self._stage)
            assignments = {}
        else:
            self._require("submit", WorkflowStage.ASSIGNING)
            assignments = self.assignment.assignments

        record = self.builder.build_submission(
            self.header,
            self.reconciliation.items,
            assignments,
            actor=actor,
            existing=self.existing,
        )
        return self._hand_off(record, WorkflowStage.SUBMITTED, on_save)
