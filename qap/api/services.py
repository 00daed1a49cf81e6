"""
API service layer: in-process editing sessions and the record outbox.

The outbox stands in for the external save/submit collaborator; finished
records land there and can be reopened for editing.
"""

import logging
import uuid
from typing import Dict, Optional

from ..catalog.catalog_loader import load_catalog
from ..lifecycle.lifecycle_models import QAPRecord
from ..lifecycle.record_builder import LifecycleRecordBuilder
from ..lifecycle.session import QAPSession
from ..orchestrator.config import get_settings

logger = logging.getLogger(__name__)


class RecordOutbox:
    """Finished records keyed by QAP id. Latest hand-off wins."""

    def __init__(self):
        self._records: Dict[str, QAPRecord] = {}

    def put(self, record: QAPRecord):
        self._records[record.id] = record
        logger.info(
            f"Record {record.id} handed off ({record.status.value})",
            extra={"qap_id": record.id, "status": record.status.value},
        )

    def get(self, record_id: str) -> Optional[QAPRecord]:
        return self._records.get(record_id)

    def next_sno(self, default: int) -> int:
        """First sno after every item already handed off."""
        highest = max(
            (item.sno for record in self._records.values() for item in record.items),
            default=None,
        )
        return default if highest is None else max(default, highest + 1)

    def clear(self):
        self._records.clear()


class SessionRegistry:
    """Active editing sessions keyed by session id. Finalized sessions are discarded."""

    def __init__(self, outbox: RecordOutbox):
        self._sessions: Dict[str, QAPSession] = {}
        self._outbox = outbox

    def _session_kwargs(self) -> dict:
        workflow = get_settings().workflow
        return {
            "builder": LifecycleRecordBuilder(default_actor=workflow.default_actor),
            "on_save": self._outbox.put,
            "allow_direct_submit": workflow.allow_direct_submit,
        }

    def start_new(self, start_sno: Optional[int] = None):
        workflow = get_settings().workflow
        if start_sno is None:
            start_sno = self._outbox.next_sno(workflow.start_sno)
        session = QAPSession.start_new(
            load_catalog(workflow.catalog_path), start_sno, **self._session_kwargs()
        )
        return self._register(session)

    def start_edit(self, record: QAPRecord):
        return self._register(QAPSession.edit(record, **self._session_kwargs()))

    def _register(self, session: QAPSession):
        session_id = uuid.uuid4().hex
        self._sessions[session_id] = session
        logger.info(f"Opened session {session_id} (editing={session.is_editing})")
        return session_id, session

    def get(self, session_id: str) -> Optional[QAPSession]:
        return self._sessions.get(session_id)

    def discard(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        logger.info(f"Closed session {session_id} ({session.stage.value})")
        return True

    def __len__(self) -> int:
        return len(self._sessions)

    def clear(self):
        self._sessions.clear()


outbox = RecordOutbox()
registry = SessionRegistry(outbox)
