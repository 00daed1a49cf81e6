"""
Item Reconciliation Engine
==========================

Holds the ordered SpecificationItem sequence of one QAP and applies the
customer's match decisions to it.

Usage:
    engine = ReconciliationEngine.seed(load_catalog(), start_sno=1)
    engine.set_match_decision(0, MatchDecision.MATCHES)
    engine.set_match_decision(12, MatchDecision.DOES_NOT_MATCH)
    engine.edit_customer_specification(12, "Max 1 scratch <= 10mm")
"""

import logging
from typing import Dict, Iterable, List

from ..catalog.catalog_models import CriteriaGroup, SpecificationCatalog
from .item_models import MatchDecision, SpecificationItem

logger = logging.getLogger(__name__)


class ItemNotFoundError(LookupError):
    """Raised for an item index or sequence number outside the QAP."""
    pass


class ReconciliationEngine:
    """
    Ordered item store for one QAP.

    MQP items come first, Visual/EL items after; the two display tables
    are projections over this single list.
    """

    def __init__(self, items: Iterable[SpecificationItem] = ()):
        self._items: List[SpecificationItem] = list(items)
        snos = [item.sno for item in self._items]
        if len(snos) != len(set(snos)):
            raise ValueError("Sequence numbers must be unique within a QAP")

    @classmethod
    def seed(cls, catalog: SpecificationCatalog, start_sno: int) -> "ReconciliationEngine":
        """Number catalog rows start_sno, start_sno+1, ... across both groups."""
        rows = list(catalog.mqp) + list(catalog.visual_el)
        items = [
            SpecificationItem(sno=start_sno + offset, row=row)
            for offset, row in enumerate(rows)
        ]
        logger.info(
            f"Seeded {len(items)} items ({len(catalog.mqp)} MQP, "
            f"{len(catalog.visual_el)} Visual/EL) from sno {start_sno}"
        )
        return cls(items)

    @classmethod
    def from_items(cls, items: Iterable[SpecificationItem]) -> "ReconciliationEngine":
        """Edit mode: seed from stored items, MQP group first."""
        items = list(items)
        mqp = [i for i in items if i.criteria_group == CriteriaGroup.MQP]
        visual_el = [i for i in items if i.criteria_group != CriteriaGroup.MQP]
        return cls(mqp + visual_el)

    # =========================================================================
    # Views
    # =========================================================================

    @property
    def items(self) -> List[SpecificationItem]:
        return list(self._items)

    @property
    def mqp_items(self) -> List[SpecificationItem]:
        return [i for i in self._items if i.criteria_group == CriteriaGroup.MQP]

    @property
    def visual_el_items(self) -> List[SpecificationItem]:
        return [i for i in self._items if i.criteria_group != CriteriaGroup.MQP]

    def mismatched_items(self) -> List[SpecificationItem]:
        return [i for i in self._items if i.is_mismatch]

    def decision_counts(self) -> Dict[str, int]:
        """Matched / mismatched / pending counts across all items."""
        matched = sum(1 for i in self._items if i.match == MatchDecision.MATCHES)
        mismatched = sum(1 for i in self._items if i.is_mismatch)
        return {
            "matched": matched,
            "mismatched": mismatched,
            "pending": len(self._items) - matched - mismatched,
        }

    def get(self, index: int) -> SpecificationItem:
        if not 0 <= index < len(self._items):
            raise ItemNotFoundError(f"No item at index {index} (QAP has {len(self._items)} items)")
        return self._items[index]

    def index_of(self, sno: int) -> int:
        for index, item in enumerate(self._items):
            if item.sno == sno:
                return index
        raise ItemNotFoundError(f"No item with sno {sno}")

    def find(self, sno: int) -> SpecificationItem:
        return self._items[self.index_of(sno)]

    # =========================================================================
    # Mutations
    # =========================================================================

    def set_match_decision(self, index: int, decision: MatchDecision) -> SpecificationItem:
        """
        Record a match decision and derive the customer specification.

        MATCHES copies the baseline; DOES_NOT_MATCH clears to "" for free
        text entry. Any previous customer text is overwritten.
        """
        item = self.get(index)
        decision = MatchDecision(decision)
        item.match = decision
        if decision == MatchDecision.MATCHES:
            item.customer_specification = item.baseline_specification
        else:
            item.customer_specification = ""
        logger.debug(f"sno {item.sno}: match={decision.value}")
        return item

    def set_match_decision_for(self, sno: int, decision: MatchDecision) -> SpecificationItem:
        return self.set_match_decision(self.index_of(sno), decision)

    def edit_customer_specification(self, index: int, text: str) -> SpecificationItem:
        """Set the customer specification verbatim, whatever the decision."""
        item = self.get(index)
        item.customer_specification = text
        logger.debug(f"sno {item.sno}: customer specification edited")
        return item

    def edit_customer_specification_for(self, sno: int, text: str) -> SpecificationItem:
        return self.edit_customer_specification(self.index_of(sno), text)
