"""
QAP Mismatch Assignment
=======================

Routes every non-matching item to the production, quality and/or
technical departments.
"""

from .assignment_models import AssignmentRecord, Department
from .assignment_engine import (
    AssignmentEngine,
    AssignmentError,
    UnknownAssignmentError,
    AssignmentConsistencyError,
)
