"""
Specification Item Models
=========================

One reconcilable line of a QAP: a catalog row plus the customer's match
decision and accepted specification.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..catalog.catalog_models import CatalogRow, CriteriaGroup, row_from_dict


class MatchDecision(str, Enum):
    """Customer decision on a baseline row. Values match the stored format."""
    MATCHES = "yes"
    DOES_NOT_MATCH = "no"


@dataclass
class SpecificationItem:
    """
    A catalog row numbered into a QAP.

    customer_specification follows match:
        None            -> None (undefined)
        MATCHES         -> baseline_specification
        DOES_NOT_MATCH  -> free text, possibly empty
    """
    sno: int
    row: CatalogRow
    match: Optional[MatchDecision] = None
    customer_specification: Optional[str] = None

    @property
    def criteria_group(self) -> CriteriaGroup:
        return self.row.criteria_group

    @property
    def baseline_specification(self) -> str:
        return self.row.baseline_specification

    @property
    def sub_criteria(self) -> str:
        return self.row.sub_criteria

    @property
    def is_mismatch(self) -> bool:
        return self.match == MatchDecision.DOES_NOT_MATCH

    def to_dict(self) -> dict:
        data = {"sno": self.sno}
        data.update(self.row.to_dict())
        data["match"] = self.match.value if self.match else None
        data["customer_specification"] = self.customer_specification
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "SpecificationItem":
        match = data.get("match")
        return cls(
            sno=int(data["sno"]),
            row=row_from_dict(data),
            match=MatchDecision(match) if match else None,
            customer_specification=data.get("customer_specification"),
        )
