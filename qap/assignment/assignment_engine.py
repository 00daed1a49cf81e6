"""
Mismatch Assignment Engine
==========================

Maintains the sno -> AssignmentRecord map for every item marked
"does not match", and resolves assignment keys back to their items.

Usage:
    engine = AssignmentEngine()
    engine.enter(reconciliation.items)
    engine.toggle(14, Department.QUALITY, True)
"""

import logging
from typing import Dict, Iterable, List, Optional

from ..reconciliation.item_models import SpecificationItem
from .assignment_models import AssignmentRecord, Department

logger = logging.getLogger(__name__)


class AssignmentError(Exception):
    """Base exception for assignment map failures."""
    pass


class UnknownAssignmentError(AssignmentError):
    """Toggle requested for a sequence number with no assignment entry."""

    def __init__(self, sno: int):
        self.sno = sno
        super().__init__(f"No assignment entry for sno {sno}")


class AssignmentConsistencyError(AssignmentError):
    """An assignment key has no matching item. Item list and map disagree."""

    def __init__(self, sno: int):
        self.sno = sno
        super().__init__(f"Assignment for sno {sno} has no matching specification item")


class AssignmentEngine:
    """
    Per-item department routing for mismatches.

    The map is rebuilt from scratch on every `enter()`. An engine loaded
    with a non-empty map from an existing record keeps that map on its
    first `enter()` instead, minus entries whose item now matches.
    """

    def __init__(self, loaded: Optional[Dict[int, AssignmentRecord]] = None):
        self._assignments: Dict[int, AssignmentRecord] = dict(loaded or {})
        self._keep_loaded = bool(self._assignments)

    @property
    def assignments(self) -> Dict[int, AssignmentRecord]:
        return dict(self._assignments)

    def enter(self, items: Iterable[SpecificationItem]) -> Dict[int, AssignmentRecord]:
        """Rebuild the map: one unflagged entry per mismatched item."""
        if self._keep_loaded:
            self._keep_loaded = False
            self.prune(items)
            logger.info(f"Keeping {len(self._assignments)} loaded assignments")
            return self.assignments

        previous = set(self._assignments)
        self._assignments = {
            item.sno: AssignmentRecord() for item in items if item.is_mismatch
        }
        current = set(self._assignments)
        logger.info(
            f"Assignment map rebuilt: {len(current)} mismatches "
            f"(+{len(current - previous)} new, -{len(previous - current)} dropped)"
        )
        return self.assignments

    def prune(self, items: Iterable[SpecificationItem]) -> List[int]:
        """Drop entries whose item is no longer a mismatch. Returns dropped snos."""
        mismatched = {item.sno for item in items if item.is_mismatch}
        dropped = sorted(sno for sno in self._assignments if sno not in mismatched)
        for sno in dropped:
            del self._assignments[sno]
        if dropped:
            logger.info(f"Dropped stale assignments for sno {dropped}")
        return dropped

    def toggle(self, sno: int, department: Department, value: bool) -> AssignmentRecord:
        record = self._assignments.get(sno)
        if record is None:
            raise UnknownAssignmentError(sno)
        record.set(department, value)
        logger.debug(f"sno {sno}: {Department(department).value}={bool(value)}")
        return record

    def lookup_item(
        self, sno: int, items: Iterable[SpecificationItem],
    ) -> SpecificationItem:
        """Resolve an assignment key to its item across both criteria groups."""
        if sno not in self._assignments:
            raise UnknownAssignmentError(sno)
        for item in items:
            if item.sno == sno:
                return item
        logger.error(f"Assignment map references sno {sno} absent from the item list")
        raise AssignmentConsistencyError(sno)

    def unassigned(self) -> List[int]:
        """Mismatches not yet routed to any department."""
        return sorted(sno for sno, rec in self._assignments.items() if not rec.is_assigned)

    def by_department(self, department: Department) -> List[int]:
        return sorted(sno for sno, rec in self._assignments.items() if rec.get(department))

    def to_dict(self) -> Dict[int, Dict[str, bool]]:
        return {sno: rec.to_dict() for sno, rec in sorted(self._assignments.items())}
