"""
QAP API Models
==============

Pydantic models for API request/response serialization.
"""

from pydantic import BaseModel, Field
from typing import List, Dict, Optional, Any

from ..assignment.assignment_models import Department
from ..reconciliation.item_models import MatchDecision


class StartSessionRequest(BaseModel):
    """Start a new QAP, or reopen a handed-off record when record_id is set."""
    record_id: Optional[str] = None
    start_sno: Optional[int] = Field(None, ge=1)


class HeaderUpdateRequest(BaseModel):
    customer_name: Optional[str] = None
    project_name: Optional[str] = None
    order_quantity: Optional[float] = Field(None, ge=0)
    product_type: Optional[str] = None
    plant: Optional[str] = None


class MatchDecisionRequest(BaseModel):
    match: MatchDecision


class CustomerSpecRequest(BaseModel):
    text: str = ""


class DepartmentToggleRequest(BaseModel):
    department: Department
    value: bool


class FinalizeRequest(BaseModel):
    actor: Optional[str] = None


class AssignmentEntryModel(BaseModel):
    """Assignment entry with the item it routes."""
    sno: int
    sub_criteria: str
    criteria: str
    customer_specification: Optional[str] = None
    production: bool
    quality: bool
    technical: bool


class SessionResponse(BaseModel):
    session_id: str
    stage: str
    editing_record_id: Optional[str] = None
    header: Dict[str, Any]
    missing_header_fields: List[str] = Field(default_factory=list)
    decision_counts: Dict[str, int]
    mqp: List[Dict[str, Any]] = Field(default_factory=list)
    visual_el: List[Dict[str, Any]] = Field(default_factory=list)
    assignments: List[AssignmentEntryModel] = Field(default_factory=list)
    unassigned: List[int] = Field(default_factory=list)
    record_id: Optional[str] = None


class RecordResponse(BaseModel):
    record: Dict[str, Any]


class HealthResponse(BaseModel):
    status: str
    version: str
    active_sessions: int = 0
