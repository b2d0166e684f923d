"""
LangGraph State Definition
"""
from datetime import datetime
from typing import Dict, Optional, TypedDict

from graph.session import ExtractionSession
from schemas.profile_schemas import CanonicalProfile, ProvenanceSet, RawDraft
from utils.errors import DocumentError


class ResumeState(TypedDict):
    """
    State object passed between LangGraph nodes

    Each node reads from and writes to this state. The session is shared
    with the caller so progress is visible while the graph runs.
    """
    # Input
    session: ExtractionSession
    file_path: str
    current_profile: CanonicalProfile

    # Extraction
    draft: Optional[RawDraft]

    # Mapping
    profile: Optional[CanonicalProfile]
    provenance: ProvenanceSet

    # Error Handling
    error: Optional[DocumentError]

    # Timing & Metadata
    start_time: datetime
    node_timings: Dict[str, float]
