"""
Pydantic schemas for resume extraction
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class DraftSource(str, Enum):
    """Which extraction tier produced a RawDraft"""
    REMOTE_SERVICE = "remote-service"
    LOCAL_HEURISTIC = "local-heuristic"


class ExtractionStage(str, Enum):
    """Pipeline stages of one upload"""
    IDLE = "idle"
    UPLOADING = "uploading"
    REMOTE_PARSING = "remote_parsing"
    REMOTE_SUCCEEDED = "remote_succeeded"
    REMOTE_FAILED = "remote_failed"
    LOCAL_PARSING = "local_parsing"
    MAPPING = "mapping"
    NARRATIVE_GENERATION = "narrative_generation"
    COMPLETE = "complete"
    ERROR = "error"


TERMINAL_STAGES = frozenset({ExtractionStage.COMPLETE, ExtractionStage.ERROR})


# ==================== Raw Draft (per-tier output) ====================

class NameField(BaseModel):
    raw: str = ""


class RawDraft(BaseModel):
    """Loosely-typed candidate fields from one extraction tier"""
    source: DraftSource
    name: NameField = Field(default_factory=NameField)
    emails: List[str] = Field(default_factory=list)
    phone_numbers: List[str] = Field(default_factory=list)
    websites: List[str] = Field(default_factory=list)  # Unclassified URLs
    linkedin: str = ""
    github: str = ""
    twitter: str = ""
    blog: str = ""
    whatsapp: str = ""
    telegram: str = ""
    profession: str = ""
    location: Union[str, Dict[str, Any]] = ""
    summary: str = ""
    objective: str = ""
    tagline: str = ""
    about_me: str = ""
    education: List[Dict[str, Any]] = Field(default_factory=list)
    work_experience: List[Dict[str, Any]] = Field(default_factory=list)
    skills: List[Any] = Field(default_factory=list)  # str or {"name": ...}
    projects: List[Dict[str, Any]] = Field(default_factory=list)
    certifications: List[Any] = Field(default_factory=list)  # raw lines or {"name", "link"}
    awards: List[Any] = Field(default_factory=list)
    sections: List[Dict[str, Any]] = Field(default_factory=list)  # {"sectionType", "text"}


# ==================== Canonical Profile (form layer shape) ====================

class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EducationEntry(_CamelModel):
    degree: str = ""
    institution: str = ""
    start_year: str = ""
    end_year: str = ""
    percentage: str = ""
    cgpa: str = ""


class ExperienceEntry(_CamelModel):
    job_title: str = ""
    organization: str = ""
    start_date: str = ""
    end_date: str = ""
    description: str = ""


class ProjectEntry(_CamelModel):
    name: str = ""
    description: str = ""
    tech: List[str] = Field(default_factory=list)


class CertificationEntry(_CamelModel):
    name: str = ""
    link: str = ""


class CanonicalProfile(_CamelModel):
    """Profile schema consumed by the multi-step form"""
    full_name: str = ""
    current_role: str = ""
    location: str = ""
    short_bio: str = ""
    email: str = ""
    phone: str = ""
    linkedin_url: str = ""
    github_url: str = ""
    twitter_url: str = ""
    blog_url: str = ""
    whatsapp_url: str = ""
    telegram_url: str = ""
    about_me: str = ""
    education: List[EducationEntry] = Field(default_factory=list)
    experience: List[ExperienceEntry] = Field(default_factory=list)
    technical_skills: List[str] = Field(default_factory=list)
    projects: List[ProjectEntry] = Field(default_factory=list)
    certifications: List[CertificationEntry] = Field(default_factory=list)
    awards: List[str] = Field(default_factory=list)


# Names of CanonicalProfile fields populated by extraction in one request
ProvenanceSet = FrozenSet[str]


# ==================== Tier Outcomes ====================

class RemoteParsingUnavailable(BaseModel):
    """Remote parsing failed; the orchestrator falls back to local parsing"""
    cause: str


class NarrativeGenerated(BaseModel):
    text: str


class NarrativeGenerationFailed(BaseModel):
    cause: str


class NarrativeGenerationTimedOut(BaseModel):
    timeout_seconds: float

    @property
    def cause(self) -> str:
        return f"About Me generation timed out after {self.timeout_seconds:g}s"


RemoteParseOutcome = Union[RawDraft, RemoteParsingUnavailable]
NarrativeOutcome = Union[NarrativeGenerated, NarrativeGenerationFailed, NarrativeGenerationTimedOut]


# ==================== Session / Result ====================

class SessionStatus(_CamelModel):
    """Progress/status tuple shown to the user while a resume is processed"""
    session_id: str
    stage: ExtractionStage
    progress: int = Field(ge=0, le=100)
    status: str = ""
    last_error: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)


class ExtractionResult(_CamelModel):
    """Profile patch returned to the form layer"""
    session_id: str
    file_path: Optional[str] = None
    profile: CanonicalProfile
    provenance: ProvenanceSet = frozenset()
    source: Optional[DraftSource] = None
    stage: ExtractionStage = ExtractionStage.COMPLETE
    warnings: List[str] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=datetime.utcnow)
