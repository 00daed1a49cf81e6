"""
Mismatch Assignment Models
==========================

Departmental routing for specification items the customer did not accept.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List


class Department(str, Enum):
    """Departments that can own a mismatch."""
    PRODUCTION = "production"
    QUALITY = "quality"
    TECHNICAL = "technical"


@dataclass
class AssignmentRecord:
    """Which departments must act on one mismatched item. All False at creation."""
    production: bool = False
    quality: bool = False
    technical: bool = False

    def set(self, department: Department, value: bool):
        setattr(self, Department(department).value, bool(value))

    def get(self, department: Department) -> bool:
        return getattr(self, Department(department).value)

    @property
    def departments(self) -> List[Department]:
        return [d for d in Department if self.get(d)]

    @property
    def is_assigned(self) -> bool:
        return self.production or self.quality or self.technical

    def to_dict(self) -> Dict[str, bool]:
        return {
            "production": self.production,
            "quality": self.quality,
            "technical": self.technical,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AssignmentRecord":
        return cls(
            production=bool(data.get("production", False)),
            quality=bool(data.get("quality", False)),
            technical=bool(data.get("technical", False)),
        )
