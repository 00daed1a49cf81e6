"""
Specification Catalog Models
============================

Read-only baseline specification rows supplied by the manufacturer's
standard inspection plan. Two row shapes exist:

    - MQPSpecification: measurable quality parameters (dimensional and
      electrical measurements). Baseline text is `specification`.
    - VisualELSpecification: visual-appearance and electro-luminescence
      defect criteria. Baseline text is `criteria_limits`.

Rows are modelled as a tagged variant so every field is meaningful for
its group; `criteria_group` is the tag.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union


class CriteriaGroup(str, Enum):
    """Criteria group tag. Values match the stored wire format."""
    MQP = "MQP"
    VISUAL = "Visual"
    EL = "EL"


VISUAL_EL_GROUPS = (CriteriaGroup.VISUAL, CriteriaGroup.EL)


@dataclass(frozen=True)
class MQPSpecification:
    """A measurable-quality-parameter catalog row."""
    sub_criteria: str
    component_operation: str
    characteristics: str
    spec_class: str           # Critical, Major, Minor
    type_of_check: str
    sampling: str
    specification: str

    @property
    def criteria_group(self) -> CriteriaGroup:
        return CriteriaGroup.MQP

    @property
    def baseline_specification(self) -> str:
        return self.specification

    def to_dict(self) -> dict:
        return {
            "criteria": self.criteria_group.value,
            "sub_criteria": self.sub_criteria,
            "component_operation": self.component_operation,
            "characteristics": self.characteristics,
            "class": self.spec_class,
            "type_of_check": self.type_of_check,
            "sampling": self.sampling,
            "specification": self.specification,
        }


@dataclass(frozen=True)
class VisualELSpecification:
    """A visual or EL defect-criteria catalog row."""
    criteria: CriteriaGroup   # VISUAL or EL
    sub_criteria: str
    defect: str
    defect_class: str         # Critical, Major, Minor
    description: str
    criteria_limits: str

    def __post_init__(self):
        if self.criteria not in VISUAL_EL_GROUPS:
            raise ValueError(
                f"VisualELSpecification criteria must be Visual or EL, got: {self.criteria}"
            )

    @property
    def criteria_group(self) -> CriteriaGroup:
        return self.criteria

    @property
    def baseline_specification(self) -> str:
        return self.criteria_limits

    def to_dict(self) -> dict:
        return {
            "criteria": self.criteria.value,
            "sub_criteria": self.sub_criteria,
            "defect": self.defect,
            "defect_class": self.defect_class,
            "description": self.description,
            "criteria_limits": self.criteria_limits,
        }


CatalogRow = Union[MQPSpecification, VisualELSpecification]


def row_from_dict(data: dict) -> CatalogRow:
    """Rebuild a catalog row from its `to_dict()` form."""
    group = CriteriaGroup(data["criteria"])
    if group == CriteriaGroup.MQP:
        return MQPSpecification(
            sub_criteria=data.get("sub_criteria", ""),
            component_operation=data.get("component_operation", ""),
            characteristics=data.get("characteristics", ""),
            spec_class=data.get("class", ""),
            type_of_check=data.get("type_of_check", ""),
            sampling=data.get("sampling", ""),
            specification=data["specification"],
        )
    return VisualELSpecification(
        criteria=group,
        sub_criteria=data.get("sub_criteria", ""),
        defect=data.get("defect", ""),
        defect_class=data.get("defect_class", ""),
        description=data.get("description", ""),
        criteria_limits=data["criteria_limits"],
    )


@dataclass
class SpecificationCatalog:
    """The two ordered baseline sequences for one QAP session."""
    mqp: List[MQPSpecification] = field(default_factory=list)
    visual_el: List[VisualELSpecification] = field(default_factory=list)
    version: Optional[str] = None

    @property
    def total_rows(self) -> int:
        return len(self.mqp) + len(self.visual_el)

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "mqp": [r.to_dict() for r in self.mqp],
            "visual_el": [r.to_dict() for r in self.visual_el],
        }


@dataclass(frozen=True)
class HeaderOptions:
    """Selectable values for the QAP header fields."""
    customers: List[str]
    product_types: List[str]
    plants: List[str]

    def to_dict(self) -> dict:
        return {
            "customers": list(self.customers),
            "product_types": list(self.product_types),
            "plants": list(self.plants),
        }
