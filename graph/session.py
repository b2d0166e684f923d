"""
Extraction sessions - per-upload progress/status and the session registry
"""
import threading
import uuid
from typing import Dict, List, Optional

from schemas.profile_schemas import ExtractionStage, SessionStatus, TERMINAL_STAGES
from utils.logger import logger


# Progress reported when a stage is entered; stages not listed keep the current value
STAGE_PROGRESS: Dict[ExtractionStage, int] = {
    ExtractionStage.IDLE: 0,
    ExtractionStage.UPLOADING: 10,
    ExtractionStage.REMOTE_PARSING: 20,
    ExtractionStage.LOCAL_PARSING: 40,
    ExtractionStage.MAPPING: 50,
    ExtractionStage.NARRATIVE_GENERATION: 70,
    ExtractionStage.COMPLETE: 100,
}

STAGE_STATUS: Dict[ExtractionStage, str] = {
    ExtractionStage.IDLE: "Waiting for upload",
    ExtractionStage.UPLOADING: "Uploading resume...",
    ExtractionStage.REMOTE_PARSING: "Parsing resume...",
    ExtractionStage.REMOTE_SUCCEEDED: "Resume parsed",
    ExtractionStage.REMOTE_FAILED: "Parsing service unavailable, reading the document locally...",
    ExtractionStage.LOCAL_PARSING: "Extracting text from the PDF...",
    ExtractionStage.MAPPING: "Filling in your profile...",
    ExtractionStage.NARRATIVE_GENERATION: "Writing your About Me...",
    ExtractionStage.COMPLETE: "Profile ready",
    ExtractionStage.ERROR: "Resume processing failed",
}


class ExtractionSession:
    """
    Progress of one upload

    Progress never decreases. Once abandoned or terminal, the session
    ignores further updates.
    """

    def __init__(self, session_id: Optional[str] = None):
        self.session_id = session_id or uuid.uuid4().hex
        self.stage = ExtractionStage.IDLE
        self.progress = 0
        self.status = STAGE_STATUS[ExtractionStage.IDLE]
        self.last_error: Optional[str] = None
        self.warnings: List[str] = []
        self.abandoned = False
        self._lock = threading.Lock()

    @property
    def is_terminal(self) -> bool:
        return self.stage in TERMINAL_STAGES

    def advance(self, stage: ExtractionStage, status: Optional[str] = None) -> bool:
        """
        Move to a stage

        Returns:
            False if the session is abandoned or already terminal
        """
        with self._lock:
            if self.abandoned or self.is_terminal:
                return False
            self.stage = stage
            self.progress = max(self.progress, STAGE_PROGRESS.get(stage, self.progress))
            self.status = status or STAGE_STATUS[stage]
        logger.info("Session stage", session_id=self.session_id, stage=stage.value, progress=self.progress)
        return True

    def warn(self, message: str) -> None:
        with self._lock:
            if self.abandoned:
                return
            self.warnings.append(message)
        logger.warning(f"Session warning: {message}", session_id=self.session_id)

    def fail(self, cause: str) -> None:
        """Move to the terminal error stage with a human-readable cause"""
        with self._lock:
            if self.abandoned or self.is_terminal:
                return
            self.stage = ExtractionStage.ERROR
            self.status = STAGE_STATUS[ExtractionStage.ERROR]
            self.last_error = cause
        logger.error(f"Session failed: {cause}", session_id=self.session_id)

    def abandon(self) -> None:
        with self._lock:
            self.abandoned = True
        logger.info("Session abandoned", session_id=self.session_id)

    def to_status(self) -> SessionStatus:
        with self._lock:
            return SessionStatus(
                session_id=self.session_id,
                stage=self.stage,
                progress=self.progress,
                status=self.status,
                last_error=self.last_error,
                warnings=list(self.warnings),
            )


class SessionStore:
    """Maps session ids to independent sessions"""

    def __init__(self):
        self._sessions: Dict[str, ExtractionSession] = {}
        self._lock = threading.Lock()

    def create(self, session_id: Optional[str] = None) -> ExtractionSession:
        """Register a new session; a caller-chosen id replaces any previous session with that id"""
        session = ExtractionSession(session_id)
        with self._lock:
            self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> Optional[ExtractionSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def abandon(self, session_id: str) -> bool:
        """Abandon and forget a session; False if the id is unknown"""
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.abandon()
        return True

    def release(self, session: ExtractionSession) -> None:
        """Forget a finished session unless its id was reused by a newer upload"""
        with self._lock:
            if self._sessions.get(session.session_id) is session:
                del self._sessions[session.session_id]

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


# Global session registry
session_store = SessionStore()
