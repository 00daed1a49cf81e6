"""
QAP Lifecycle
=============

Record model, draft/submission builder, and the editing-session state
machine that hands finished records to the approval pipeline.
"""

from .lifecycle_models import (
    QAPHeader,
    QAPRecord,
    QAPStatus,
    TimelineEntry,
    SUBMISSION_ACTION,
)
from .record_builder import LifecycleRecordBuilder, HeaderValidationError
from .session import QAPSession, WorkflowStage, WorkflowStageError
