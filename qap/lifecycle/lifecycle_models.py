"""
QAP Lifecycle Record Models
===========================

The finished QAP record handed to the external save/submit collaborator
and consumed by the multi-level approval pipeline.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..assignment.assignment_models import AssignmentRecord
from ..catalog.catalog_models import CriteriaGroup
from ..reconciliation.item_models import SpecificationItem

SUBMISSION_ACTION = "Submitted for Level 2 review"


class QAPStatus(str, Enum):
    """Record status. Only DRAFT and LEVEL_2 are produced here."""
    DRAFT = "draft"
    LEVEL_2 = "level-2"
    LEVEL_3 = "level-3"
    LEVEL_4 = "level-4"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass
class QAPHeader:
    """Order identity fields. All required before submission."""
    customer_name: str = ""
    project_name: str = ""
    order_quantity: float = 0       # MW
    product_type: str = ""
    plant: str = ""

    def missing_fields(self) -> List[str]:
        missing = []
        for name in ("customer_name", "project_name", "order_quantity", "product_type", "plant"):
            value = getattr(self, name)
            if name == "order_quantity":
                if not value or value <= 0:
                    missing.append(name)
            elif not (value or "").strip():
                missing.append(name)
        return missing

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields()


@dataclass
class TimelineEntry:
    """One append-only audit line of the approval pipeline."""
    level: int
    action: str
    user: str
    timestamp: datetime

    def to_dict(self) -> dict:
        return {
            "level": self.level,
            "action": self.action,
            "user": self.user,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TimelineEntry":
        return cls(
            level=int(data["level"]),
            action=data["action"],
            user=data["user"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


def _times_to_dict(times: Dict[int, datetime]) -> Dict[int, str]:
    return {level: ts.isoformat() for level, ts in sorted(times.items())}


def _times_from_dict(data: Optional[dict]) -> Dict[int, datetime]:
    return {int(level): datetime.fromisoformat(ts) for level, ts in (data or {}).items()}


@dataclass
class QAPRecord:
    """Complete QAP lifecycle record."""
    id: str
    customer_name: str
    project_name: str
    order_quantity: float
    product_type: str
    plant: str
    status: QAPStatus
    current_level: int
    submitted_by: str
    created_at: datetime
    last_modified_at: datetime
    submitted_at: Optional[datetime] = None
    items: List[SpecificationItem] = field(default_factory=list)
    assignments: Dict[int, AssignmentRecord] = field(default_factory=dict)
    timeline: List[TimelineEntry] = field(default_factory=list)
    level_start_times: Dict[int, datetime] = field(default_factory=dict)
    level_end_times: Dict[int, datetime] = field(default_factory=dict)
    level_responses: Dict[str, Any] = field(default_factory=dict)

    @property
    def header(self) -> QAPHeader:
        return QAPHeader(
            customer_name=self.customer_name,
            project_name=self.project_name,
            order_quantity=self.order_quantity,
            product_type=self.product_type,
            plant=self.plant,
        )

    @property
    def is_draft(self) -> bool:
        return self.status == QAPStatus.DRAFT

    @property
    def mqp_items(self) -> List[SpecificationItem]:
        return [i for i in self.items if i.criteria_group == CriteriaGroup.MQP]

    @property
    def visual_el_items(self) -> List[SpecificationItem]:
        return [i for i in self.items if i.criteria_group != CriteriaGroup.MQP]

    @property
    def mismatch_count(self) -> int:
        return sum(1 for i in self.items if i.is_mismatch)

    def to_dict(self) -> dict:
        """Serialize to a JSON-ready dict."""
        return {
            "id": self.id,
            "customer_name": self.customer_name,
            "project_name": self.project_name,
            "order_quantity": self.order_quantity,
            "product_type": self.product_type,
            "plant": self.plant,
            "status": self.status.value,
            "current_level": self.current_level,
            "submitted_by": self.submitted_by,
            "submitted_at": self.submitted_at.isoformat() if self.submitted_at else None,
            "created_at": self.created_at.isoformat(),
            "last_modified_at": self.last_modified_at.isoformat(),
            "items": [i.to_dict() for i in self.items],
            "assignments": {
                sno: rec.to_dict() for sno, rec in sorted(self.assignments.items())
            },
            "timeline": [t.to_dict() for t in self.timeline],
            "level_start_times": _times_to_dict(self.level_start_times),
            "level_end_times": _times_to_dict(self.level_end_times),
            "level_responses": dict(self.level_responses),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "QAPRecord":
        """Rebuild a record from `to_dict()` output (JSON keys may be strings)."""
        try:
            submitted_at = data.get("submitted_at")
            return cls(
                id=str(data["id"]),
                customer_name=data.get("customer_name", ""),
                project_name=data.get("project_name", ""),
                order_quantity=data.get("order_quantity", 0),
                product_type=data.get("product_type", ""),
                plant=data.get("plant", ""),
                status=QAPStatus(data["status"]),
                current_level=int(data["current_level"]),
                submitted_by=data.get("submitted_by", ""),
                submitted_at=datetime.fromisoformat(submitted_at) if submitted_at else None,
                created_at=datetime.fromisoformat(data["created_at"]),
                last_modified_at=datetime.fromisoformat(data["last_modified_at"]),
                items=[SpecificationItem.from_dict(i) for i in data.get("items", [])],
                assignments={
                    int(sno): AssignmentRecord.from_dict(rec)
                    for sno, rec in (data.get("assignments") or {}).items()
                },
                timeline=[TimelineEntry.from_dict(t) for t in data.get("timeline", [])],
                level_start_times=_times_from_dict(data.get("level_start_times")),
                level_end_times=_times_from_dict(data.get("level_end_times")),
                level_responses=dict(data.get("level_responses") or {}),
            )
        except KeyError as e:
            raise ValueError(f"QAP record is missing field {e}") from e
