"""
Lifecycle Record Builder
========================

Assembles a finished QAPRecord, either as a level-1 draft or as a
level-2 submission. The returned record is fully formed; collaborators
store it without further mutation.

Usage:
    builder = LifecycleRecordBuilder()
    record = builder.build_submission(header, items, assignments, actor="qa.lead")
"""

import copy
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

from ..assignment.assignment_models import AssignmentRecord
from ..reconciliation.item_models import SpecificationItem
from .lifecycle_models import (
    QAPHeader, QAPRecord, QAPStatus, TimelineEntry, SUBMISSION_ACTION,
)

logger = logging.getLogger(__name__)


class HeaderValidationError(ValueError):
    """Submission refused because required header fields are empty."""

    def __init__(self, missing_fields: List[str]):
        self.missing_fields = list(missing_fields)
        super().__init__(
            f"Missing required fields for submission: {', '.join(self.missing_fields)}"
        )


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LifecycleRecordBuilder:
    """
    Builds draft and submission records.

    `existing` (edit mode) keeps its id and created_at; every build sets
    last_modified_at to now.
    """

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        default_actor: str = "unknown",
    ):
        self._clock = clock or utc_now
        self._default_actor = default_actor

    def _actor(self, actor: Optional[str]) -> str:
        return actor.strip() if actor and actor.strip() else self._default_actor

    def _base(
        self,
        header: QAPHeader,
        items: Iterable[SpecificationItem],
        assignments: Dict[int, AssignmentRecord],
        actor: str,
        now: datetime,
        existing: Optional[QAPRecord],
    ) -> QAPRecord:
        return QAPRecord(
            id=existing.id if existing else uuid.uuid4().hex,
            customer_name=header.customer_name,
            project_name=header.project_name,
            order_quantity=header.order_quantity,
            product_type=header.product_type,
            plant=header.plant,
            status=QAPStatus.DRAFT,
            current_level=1,
            submitted_by=actor,
            created_at=existing.created_at if existing else now,
            last_modified_at=now,
            items=copy.deepcopy(list(items)),
            assignments=copy.deepcopy(dict(assignments)),
        )

    def build_draft(
        self,
        header: QAPHeader,
        items: Iterable[SpecificationItem],
        assignments: Dict[int, AssignmentRecord],
        actor: Optional[str] = None,
        existing: Optional[QAPRecord] = None,
    ) -> QAPRecord:
        """Level-1 draft. Header may be incomplete, items in any state."""
        now = self._clock()
        record = self._base(header, items, assignments, self._actor(actor), now, existing)
        record.submitted_at = None
        record.timeline = []
        record.level_start_times = {1: now}
        record.level_end_times = {}

        logger.info(
            f"Built draft {record.id}: {len(record.items)} items, "
            f"{len(record.assignments)} assignments",
            extra={"qap_id": record.id, "status": record.status.value},
        )
        return record

    def build_submission(
        self,
        header: QAPHeader,
        items: Iterable[SpecificationItem],
        assignments: Dict[int, AssignmentRecord],
        actor: Optional[str] = None,
        existing: Optional[QAPRecord] = None,
    ) -> QAPRecord:
        """
        Level-2 submission.

        Raises:
            HeaderValidationError: If any required header field is empty
        """
        missing = header.missing_fields()
        if missing:
            logger.warning(f"Submission refused, missing header fields: {missing}")
            raise HeaderValidationError(missing)

        now = self._clock()
        actor = self._actor(actor)
        record = self._base(header, items, assignments, actor, now, existing)
        record.status = QAPStatus.LEVEL_2
        record.current_level = 2
        record.submitted_at = now
        record.timeline = [
            TimelineEntry(level=2, action=SUBMISSION_ACTION, user=actor, timestamp=now),
        ]
        record.level_start_times = {1: now, 2: now}
        record.level_end_times = {1: now}

        logger.info(
            f"Built submission {record.id} by {actor}: {len(record.items)} items, "
            f"{len(record.assignments)} assignments",
            extra={"qap_id": record.id, "actor": actor, "status": record.status.value},
        )
        return record
