"""
QAP Workflow API Routes
=======================

GET  /api/qap/options                          - header option lists
GET  /api/qap/catalog                          - baseline catalog
POST /api/qap/sessions                         - start (new or edit) a session
GET  /api/qap/sessions/{sid}                   - session state
PUT  /api/qap/sessions/{sid}/header            - update header fields
PUT  /api/qap/sessions/{sid}/items/{sno}/match - set match decision
PUT  /api/qap/sessions/{sid}/items/{sno}/customer-spec
POST /api/qap/sessions/{sid}/assignments       - enter assignment stage
POST /api/qap/sessions/{sid}/review            - back to review
PUT  /api/qap/sessions/{sid}/assignments/{sno} - toggle a department
POST /api/qap/sessions/{sid}/draft             - save as draft
POST /api/qap/sessions/{sid}/submit            - submit for level 2
DELETE /api/qap/sessions/{sid}                 - abandon a session
GET  /api/qap/records/{record_id}              - handed-off record
"""

import dataclasses
import logging
from fastapi import APIRouter, HTTPException

from ..assignment.assignment_engine import UnknownAssignmentError
from ..catalog.catalog_loader import header_options, load_catalog
from ..lifecycle.record_builder import HeaderValidationError
from ..lifecycle.session import (
    QAPSession, TERMINAL_STAGES, WorkflowStage, WorkflowStageError,
)
from ..orchestrator.config import get_settings
from ..reconciliation.reconciliation_engine import ItemNotFoundError
from .models import (
    AssignmentEntryModel,
    CustomerSpecRequest,
    DepartmentToggleRequest,
    FinalizeRequest,
    HeaderUpdateRequest,
    MatchDecisionRequest,
    RecordResponse,
    SessionResponse,
    StartSessionRequest,
)
from .services import outbox, registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/qap", tags=["QAP"])


def _get_session(session_id: str) -> QAPSession:
    session = registry.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"No session {session_id}")
    return session


def _session_response(session_id: str, session: QAPSession) -> SessionResponse:
    assignments = []
    if session.stage == WorkflowStage.ASSIGNING:
        for item, record in session.assignment_view():
            assignments.append(AssignmentEntryModel(
                sno=item.sno,
                sub_criteria=item.sub_criteria,
                criteria=item.criteria_group.value,
                customer_specification=item.customer_specification,
                **record.to_dict(),
            ))

    return SessionResponse(
        session_id=session_id,
        stage=session.stage.value,
        editing_record_id=session.existing.id if session.existing else None,
        header=dataclasses.asdict(session.header),
        missing_header_fields=session.header.missing_fields(),
        decision_counts=session.reconciliation.decision_counts(),
        mqp=[i.to_dict() for i in session.reconciliation.mqp_items],
        visual_el=[i.to_dict() for i in session.reconciliation.visual_el_items],
        assignments=assignments,
        unassigned=session.assignment.unassigned() if assignments else [],
        record_id=session.record.id if session.record else None,
    )


def _run(session_id: str, operation):
    """Apply an operation to a session, mapping workflow errors to HTTP codes."""
    session = _get_session(session_id)
    try:
        operation(session)
    except (ItemNotFoundError, UnknownAssignmentError) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except WorkflowStageError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except HeaderValidationError as e:
        raise HTTPException(
            status_code=422,
            detail={"message": str(e), "missing_fields": e.missing_fields},
        )
    if session.stage in TERMINAL_STAGES:
        registry.discard(session_id)
    return _session_response(session_id, session)


@router.get("/options")
async def get_options():
    return header_options().to_dict()


@router.get("/catalog")
async def get_catalog():
    return load_catalog(get_settings().workflow.catalog_path).to_dict()


@router.post("/sessions", response_model=SessionResponse, status_code=201)
async def start_session(request: StartSessionRequest):
    """Start a new QAP, or reopen a handed-off record for editing."""
    if request.record_id:
        record = outbox.get(request.record_id)
        if record is None:
            raise HTTPException(status_code=404, detail=f"No record {request.record_id}")
        session_id, session = registry.start_edit(record)
    else:
        session_id, session = registry.start_new(request.start_sno)
    return _session_response(session_id, session)


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str):
    return _session_response(session_id, _get_session(session_id))


@router.put("/sessions/{session_id}/header", response_model=SessionResponse)
async def update_header(session_id: str, request: HeaderUpdateRequest):
    fields = request.model_dump(exclude_none=True)
    return _run(session_id, lambda s: s.update_header(**fields))


@router.put("/sessions/{session_id}/items/{sno}/match", response_model=SessionResponse)
async def set_match(session_id: str, sno: int, request: MatchDecisionRequest):
    return _run(session_id, lambda s: s.set_match_decision_for(sno, request.match))


@router.put("/sessions/{session_id}/items/{sno}/customer-spec", response_model=SessionResponse)
async def set_customer_spec(session_id: str, sno: int, request: CustomerSpecRequest):
    return _run(session_id, lambda s: s.edit_customer_specification_for(sno, request.text))


@router.post("/sessions/{session_id}/assignments", response_model=SessionResponse)
async def enter_assignments(session_id: str):
    return _run(session_id, lambda s: s.enter_assignment_stage())


@router.post("/sessions/{session_id}/review", response_model=SessionResponse)
async def back_to_review(session_id: str):
    return _run(session_id, lambda s: s.return_to_review())


@router.put("/sessions/{session_id}/assignments/{sno}", response_model=SessionResponse)
async def toggle_department(session_id: str, sno: int, request: DepartmentToggleRequest):
    return _run(
        session_id, lambda s: s.toggle_department(sno, request.department, request.value)
    )


@router.post("/sessions/{session_id}/draft", response_model=SessionResponse)
async def save_draft(session_id: str, request: FinalizeRequest):
    return _run(session_id, lambda s: s.save_draft(actor=request.actor))


@router.post("/sessions/{session_id}/submit", response_model=SessionResponse)
async def submit(session_id: str, request: FinalizeRequest):
    return _run(session_id, lambda s: s.submit(actor=request.actor))


@router.get("/records/{record_id}", response_model=RecordResponse)
async def get_record(record_id: str):
    record = outbox.get(record_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"No record {record_id}")
    return RecordResponse(record=record.to_dict())


@router.delete("/sessions/{session_id}", status_code=204)
async def abandon_session(session_id: str):
    """Close a session without handing off a record."""
    if not registry.discard(session_id):
        raise HTTPException(status_code=404, detail=f"No session {session_id}")
