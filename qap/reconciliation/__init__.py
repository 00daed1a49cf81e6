"""
QAP Item Reconciliation
=======================

Match decisions and derived customer specifications per catalog row.
"""

from .item_models import MatchDecision, SpecificationItem
from .reconciliation_engine import ReconciliationEngine, ItemNotFoundError
