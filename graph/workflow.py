"""
LangGraph Workflow - Orchestrates the extraction tiers in a stateful graph
"""
import mimetypes
import time
from datetime import datetime
from pathlib import Path
from typing import Literal, Optional, Union

from langgraph.graph import END, StateGraph

from agents import (
    field_mapper_agent,
    narrative_agent,
    pattern_extractor_agent,
    remote_parser_agent,
)
from config import settings
from graph.session import ExtractionSession, session_store
from graph.state import ResumeState
from schemas.profile_schemas import (
    CanonicalProfile,
    ExtractionResult,
    ExtractionStage,
    NarrativeGenerated,
    RawDraft,
)
from utils.document_loader import document_loader
from utils.errors import DocumentError, UploadValidationError
from utils.logger import logger


def validate_upload(filename: str, content_type: Optional[str], size: int) -> None:
    """
    Check an upload before anything is sent to a parsing tier

    Raises:
        UploadValidationError: not a PDF, empty, or larger than MAX_UPLOAD_BYTES
    """
    content_type = content_type or mimetypes.guess_type(filename)[0]
    if content_type not in settings.ALLOWED_CONTENT_TYPES:
        raise UploadValidationError(
            "Please upload a PDF file.",
            details={"content_type": content_type, "filename": filename},
        )
    if size <= 0:
        raise UploadValidationError("The uploaded file is empty.", details={"filename": filename})
    if size > settings.MAX_UPLOAD_BYTES:
        raise UploadValidationError(
            f"File size must be less than {settings.MAX_UPLOAD_BYTES // (1024 * 1024)}MB.",
            details={"size": size, "limit": settings.MAX_UPLOAD_BYTES},
        )


class ResumeExtractionWorkflow:
    """
    LangGraph workflow for resume extraction

    Graph Flow:
    START → remote_parse → [local_parse] → map_fields → [generate_narrative] → complete → END

    Conditional edges:
    - remote_parse → local_parse (remote tier unavailable)
    - local_parse → error (document unreadable or empty)
    - map_fields → generate_narrative (mapped about_me is empty)
    - any node → END once the session is abandoned
    """

    def __init__(self):
        self.graph = self._build_graph()
        self.compiled_graph = None
        logger.info("ResumeExtractionWorkflow initialized")

    def _initialize_state(
        self,
        session: ExtractionSession,
        file_path: Path,
        current_profile: CanonicalProfile,
    ) -> ResumeState:
        return ResumeState(
            session=session,
            file_path=str(file_path),
            current_profile=current_profile,
            draft=None,
            profile=None,
            provenance=frozenset(),
            error=None,
            start_time=datetime.now(),
            node_timings={},
        )

    @staticmethod
    def _timed(state: ResumeState, node: str, started: float) -> dict:
        return {"node_timings": {**state["node_timings"], node: round(time.time() - started, 3)}}

    # ==================== Nodes ====================

    def _remote_parse_node(self, state: ResumeState) -> dict:
        """Remote parsing tier; failure is recorded as a warning"""
        session = state["session"]
        started = time.time()
        if not session.advance(ExtractionStage.REMOTE_PARSING):
            return {}

        outcome = remote_parser_agent.parse(state["file_path"])
        if isinstance(outcome, RawDraft):
            session.advance(ExtractionStage.REMOTE_SUCCEEDED)
            return {"draft": outcome, **self._timed(state, "remote_parse", started)}

        session.advance(ExtractionStage.REMOTE_FAILED)
        session.warn(outcome.cause)
        return self._timed(state, "remote_parse", started)

    def _local_parse_node(self, state: ResumeState) -> dict:
        """Local tier: decode the PDF and run the pattern extractor"""
        session = state["session"]
        started = time.time()
        if not session.advance(ExtractionStage.LOCAL_PARSING):
            return {}

        try:
            text = document_loader.extract_text(state["file_path"])
        except DocumentError as e:
            return {"error": e, **self._timed(state, "local_parse", started)}

        draft = pattern_extractor_agent.parse_text(text)
        return {"draft": draft, **self._timed(state, "local_parse", started)}

    def _map_fields_node(self, state: ResumeState) -> dict:
        session = state["session"]
        started = time.time()
        if not session.advance(ExtractionStage.MAPPING):
            return {}

        profile, provenance = field_mapper_agent.map(state["draft"], state["current_profile"])
        return {"profile": profile, "provenance": provenance, **self._timed(state, "map_fields", started)}

    def _generate_narrative_node(self, state: ResumeState) -> dict:
        """About Me generation; failure and timeout fall back to the default bio"""
        session = state["session"]
        started = time.time()
        if not session.advance(ExtractionStage.NARRATIVE_GENERATION):
            return {}

        outcome = narrative_agent.generate(state["profile"])
        about_me, warning = narrative_agent.resolve(outcome)
        if warning:
            session.warn(warning)

        provenance = state["provenance"]
        if isinstance(outcome, NarrativeGenerated):
            provenance = provenance | {"about_me"}
        return {
            "profile": state["profile"].model_copy(update={"about_me": about_me}),
            "provenance": provenance,
            **self._timed(state, "generate_narrative", started),
        }

    def _complete_node(self, state: ResumeState) -> dict:
        state["session"].advance(ExtractionStage.COMPLETE)
        return {}

    def _error_node(self, state: ResumeState) -> dict:
        error = state["error"]
        state["session"].fail(error.message if error else "Resume processing failed")
        return {}

    # ==================== Conditional Edges ====================

    def _after_remote(self, state: ResumeState) -> Literal["map_fields", "local_parse", "abandoned"]:
        if state["session"].abandoned:
            return "abandoned"
        return "map_fields" if state["draft"] is not None else "local_parse"

    def _after_local(self, state: ResumeState) -> Literal["map_fields", "error", "abandoned"]:
        if state["session"].abandoned:
            return "abandoned"
        return "error" if state["error"] is not None else "map_fields"

    def _after_mapping(self, state: ResumeState) -> Literal["generate_narrative", "complete", "abandoned"]:
        if state["session"].abandoned:
            return "abandoned"
        if state["profile"] is not None and not state["profile"].about_me:
            return "generate_narrative"
        return "complete"

    def _build_graph(self) -> StateGraph:
        """Build the LangGraph state graph"""
        workflow = StateGraph(ResumeState)

        workflow.add_node("remote_parse", self._remote_parse_node)
        workflow.add_node("local_parse", self._local_parse_node)
        workflow.add_node("map_fields", self._map_fields_node)
        workflow.add_node("generate_narrative", self._generate_narrative_node)
        workflow.add_node("complete", self._complete_node)
        workflow.add_node("error", self._error_node)

        workflow.set_entry_point("remote_parse")

        workflow.add_conditional_edges(
            "remote_parse",
            self._after_remote,
            {"map_fields": "map_fields", "local_parse": "local_parse", "abandoned": END},
        )
        workflow.add_conditional_edges(
            "local_parse",
            self._after_local,
            {"map_fields": "map_fields", "error": "error", "abandoned": END},
        )
        workflow.add_conditional_edges(
            "map_fields",
            self._after_mapping,
            {"generate_narrative": "generate_narrative", "complete": "complete", "abandoned": END},
        )
        workflow.add_edge("generate_narrative", "complete")
        workflow.add_edge("complete", END)
        workflow.add_edge("error", END)

        return workflow

    def compile(self) -> None:
        """Compile the graph (no checkpointer: the session lives in the state)"""
        if self.compiled_graph is None:
            self.compiled_graph = self.graph.compile()
            logger.info("Workflow compiled")

    def process_resume(
        self,
        file_path: Union[str, Path],
        content_type: Optional[str] = "application/pdf",
        current_profile: Optional[CanonicalProfile] = None,
        session: Optional[ExtractionSession] = None,
    ) -> Optional[ExtractionResult]:
        """
        Run a stored resume through the extraction tiers

        Args:
            file_path: Path of the stored upload
            content_type: MIME type reported by the client
            current_profile: Values already in the form
            session: Progress sink; a new registered session if omitted

        Returns:
            ExtractionResult, or None if the session was abandoned mid-run

        Raises:
            UploadValidationError: rejected before any parsing tier ran
            DocumentError: local parsing could not read the document
        """
        file_path = Path(file_path)
        session = session or session_store.create()
        logger.info(f"Processing resume: {file_path.name}", session_id=session.session_id)

        if self.compiled_graph is None:
            self.compile()

        try:
            return self._run(session, file_path, content_type, current_profile or CanonicalProfile())
        finally:
            session_store.release(session)

    def _run(
        self,
        session: ExtractionSession,
        file_path: Path,
        content_type: Optional[str],
        current_profile: CanonicalProfile,
    ) -> Optional[ExtractionResult]:
        session.advance(ExtractionStage.UPLOADING)
        try:
            size = file_path.stat().st_size if file_path.exists() else 0
            validate_upload(file_path.name, content_type, size)
        except UploadValidationError as e:
            session.fail(e.message)
            raise

        initial_state = self._initialize_state(session, file_path, current_profile)

        final_state = initial_state
        for values in self.compiled_graph.stream(initial_state, stream_mode="values"):
            final_state = values

        if session.abandoned:
            logger.info("Discarding result of abandoned session", session_id=session.session_id)
            return None

        if final_state["error"] is not None:
            raise final_state["error"]

        draft = final_state["draft"]
        logger.info(
            "Workflow execution complete",
            session_id=session.session_id,
            source=draft.source.value,
            fields=len(final_state["provenance"]),
            warnings=len(session.warnings),
            timings=final_state["node_timings"],
        )
        return ExtractionResult(
            session_id=session.session_id,
            file_path=str(file_path),
            profile=final_state["profile"],
            provenance=final_state["provenance"],
            source=draft.source,
            stage=session.stage,
            warnings=list(session.warnings),
        )


# Global workflow instance
workflow = ResumeExtractionWorkflow()
