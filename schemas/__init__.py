"""
Pydantic schemas package
"""
from schemas.profile_schemas import (
    DraftSource,
    ExtractionStage,
    TERMINAL_STAGES,
    NameField,
    RawDraft,
    EducationEntry,
    ExperienceEntry,
    ProjectEntry,
    CertificationEntry,
    CanonicalProfile,
    ProvenanceSet,
    RemoteParsingUnavailable,
    NarrativeGenerated,
    NarrativeGenerationFailed,
    NarrativeGenerationTimedOut,
    RemoteParseOutcome,
    NarrativeOutcome,
    SessionStatus,
    ExtractionResult,
)

__all__ = [
    "DraftSource",
    "ExtractionStage",
    "TERMINAL_STAGES",
    "NameField",
    "RawDraft",
    "EducationEntry",
    "ExperienceEntry",
    "ProjectEntry",
    "CertificationEntry",
    "CanonicalProfile",
    "ProvenanceSet",
    "RemoteParsingUnavailable",
    "NarrativeGenerated",
    "NarrativeGenerationFailed",
    "NarrativeGenerationTimedOut",
    "RemoteParseOutcome",
    "NarrativeOutcome",
    "SessionStatus",
    "ExtractionResult",
]
