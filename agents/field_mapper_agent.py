"""
Field Mapper Agent - RawDraft to CanonicalProfile normalization

Non-destructive merge: a draft value replaces the current value only when
it is non-empty. Every field the draft populated is recorded in the
provenance set returned alongside the profile.
"""
import re
from typing import Any, Dict, List, Optional, Set, Tuple

from agents.pattern_extractor_agent import (
    LINK_CHANNELS,
    classify_url,
    pair_certification_lines,
    segment_projects,
)
from schemas.profile_schemas import (
    CanonicalProfile,
    CertificationEntry,
    EducationEntry,
    ExperienceEntry,
    ProjectEntry,
    ProvenanceSet,
    RawDraft,
)
from utils.logger import logger


_YEAR_RE = re.compile(r"\b(?:19|20)\d{2}\b")
_RANGE_SEP_RE = re.compile(r"\s+(?:-|\u2013|\u2014|to)\s+")

# RawDraft channel -> CanonicalProfile field
CHANNEL_FIELDS = {
    "linkedin": "linkedin_url",
    "github": "github_url",
    "twitter": "twitter_url",
    "blog": "blog_url",
    "whatsapp": "whatsapp_url",
    "telegram": "telegram_url",
}


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (int, float)):
        return f"{value:g}"
    return value.strip() if isinstance(value, str) else ""


def _first(*values: Any) -> str:
    for value in values:
        text = _text(value)
        if text:
            return text
    return ""


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _date_range(value: Any) -> Tuple[str, str]:
    """'2019 - 2021' -> ('2019', '2021'); a single date is the start"""
    parts = [part.strip() for part in _RANGE_SEP_RE.split(_text(value), maxsplit=1)]
    return (parts[0], parts[1] if len(parts) > 1 else "")


def _year(value: Any) -> str:
    """'2016-09-01' -> '2016'; strings without a year are kept as-is"""
    text = _text(value)
    match = _YEAR_RE.search(text)
    return match.group(0) if match else text


class FieldMapperAgent:
    """Agent that normalizes a RawDraft into the profile form schema"""

    def __init__(self):
        self.name = "FieldMapperAgent"
        logger.info(f"{self.name} initialized")

    @staticmethod
    def _take(fields: Dict[str, Any], provenance: Set[str], name: str, value: Any) -> None:
        """Record a non-empty value and its provenance; empty values leave the field alone"""
        if value:
            fields[name] = value
            provenance.add(name)

    # ---------- scalars ----------

    def _map_identity(self, draft: RawDraft, fields: Dict[str, Any], provenance: Set[str]) -> None:
        self._take(fields, provenance, "full_name", _text(draft.name.raw))

        first_title = ""
        for job in draft.work_experience:
            first_title = _first(job.get("jobTitle"), job.get("job_title"))
            if first_title:
                break
        self._take(fields, provenance, "current_role", _first(draft.profession, first_title))

        location = draft.location
        if isinstance(location, dict):
            location = _first(location.get("formatted"), location.get("city"))
        self._take(fields, provenance, "location", _text(location))

        self._take(fields, provenance, "short_bio", _first(draft.summary, draft.objective, draft.tagline))
        self._take(fields, provenance, "about_me", _first(draft.summary, draft.objective, draft.about_me))

    def _map_contact(self, draft: RawDraft, fields: Dict[str, Any], provenance: Set[str]) -> None:
        self._take(fields, provenance, "email", _first(*draft.emails))
        self._take(fields, provenance, "phone", _first(*draft.phone_numbers))

        links = {channel: _text(getattr(draft, channel)) for channel in LINK_CHANNELS}
        for url in draft.websites:
            channel = classify_url(url)
            if channel and not links[channel]:
                links[channel] = _text(url)
        for channel, field in CHANNEL_FIELDS.items():
            self._take(fields, provenance, field, links[channel])

    # ---------- lists ----------

    def _map_education(self, draft: RawDraft) -> List[EducationEntry]:
        entries = []
        for edu in draft.education:
            accreditation = _mapping(edu.get("accreditation"))
            dates = _mapping(edu.get("dates"))
            grade = _mapping(edu.get("grade"))
            metric = _text(grade.get("metric")).lower()
            grade_value = _first(grade.get("value"), grade.get("raw"))
            range_start, range_end = _date_range("" if dates else edu.get("dates"))

            entry = EducationEntry(
                degree=_first(
                    edu.get("degree"),
                    accreditation.get("education"),
                    accreditation.get("inputStr"),
                    edu.get("accreditation"),
                ),
                institution=_first(edu.get("institution"), edu.get("organization")),
                start_year=_year(_first(edu.get("startDate"), dates.get("startDate"), range_start)),
                end_year=_year(_first(edu.get("endDate"), dates.get("completionDate"), dates.get("endDate"), range_end)),
                percentage=_first(
                    edu.get("percentage"),
                    grade_value if "%" in metric or "percent" in metric else "",
                    "" if grade else edu.get("grade"),
                ),
                cgpa=_first(edu.get("cgpa"), edu.get("gpa"), grade_value if "gpa" in metric else ""),
            )
            if entry.degree or entry.institution:
                entries.append(entry)
        return entries

    def _map_experience(self, draft: RawDraft) -> List[ExperienceEntry]:
        entries = []
        for job in draft.work_experience:
            dates = _mapping(job.get("dates"))
            range_start, range_end = _date_range("" if dates else job.get("dates"))
            end_date = _first(job.get("endDate"), dates.get("endDate"), range_end)
            if not end_date and dates.get("isCurrent"):
                end_date = "Present"

            entry = ExperienceEntry(
                job_title=_first(job.get("jobTitle"), job.get("job_title")),
                organization=_first(job.get("organization"), job.get("company")),
                start_date=_first(job.get("startDate"), dates.get("startDate"), range_start),
                end_date=end_date,
                description=_first(job.get("description"), job.get("jobDescription")),
            )
            if entry.job_title or entry.organization:
                entries.append(entry)
        return entries

    def _map_skills(self, draft: RawDraft) -> List[str]:
        names = []
        for skill in draft.skills:
            name = _text(skill.get("name")) if isinstance(skill, dict) else _text(skill)
            if name:
                names.append(name)
        return list(dict.fromkeys(names))

    def _map_projects(self, draft: RawDraft) -> List[ProjectEntry]:
        projects = draft.projects
        if not projects:
            # Remote drafts carry projects only as a free-text section
            for section in draft.sections:
                if "project" in _text(section.get("sectionType")).lower():
                    lines = [line.strip() for line in _text(section.get("text")).splitlines()]
                    projects = segment_projects([line for line in lines if line])
                    break

        entries = []
        for project in projects:
            tech = project.get("tech") or []
            if isinstance(tech, str):
                tech = [t.strip() for t in tech.split(",")]
            entry = ProjectEntry(
                name=_text(project.get("name")),
                description=_text(project.get("description")),
                tech=[_text(t) for t in tech if _text(t)],
            )
            if entry.name:
                entries.append(entry)
        return entries

    def _map_certifications(self, draft: RawDraft) -> List[CertificationEntry]:
        entries = []
        pending_lines: List[str] = []

        def flush() -> None:
            entries.extend(CertificationEntry(**pair) for pair in pair_certification_lines(pending_lines))
            pending_lines.clear()

        for cert in draft.certifications:
            if isinstance(cert, dict):
                flush()
                name = _first(cert.get("name"), cert.get("title"))
                if name:
                    entries.append(CertificationEntry(name=name, link=_first(cert.get("link"), cert.get("url"))))
            elif isinstance(cert, str):
                pending_lines.append(cert)
        flush()
        return entries

    def _map_awards(self, draft: RawDraft) -> List[str]:
        awards = []
        for award in draft.awards:
            name = _first(award.get("name"), award.get("title")) if isinstance(award, dict) else _text(award)
            if name:
                awards.append(name)
        return awards

    # ---------- entry point ----------

    def map(
        self,
        draft: RawDraft,
        current: Optional[CanonicalProfile] = None,
    ) -> Tuple[CanonicalProfile, ProvenanceSet]:
        """
        Merge a RawDraft over the current profile

        Args:
            draft: Output of either extraction tier
            current: Values already in the form, kept wherever the draft is empty

        Returns:
            (merged profile, names of the fields populated from the draft)
        """
        current = current or CanonicalProfile()
        fields: Dict[str, Any] = {}
        provenance: Set[str] = set()

        self._map_identity(draft, fields, provenance)
        self._map_contact(draft, fields, provenance)
        self._take(fields, provenance, "education", self._map_education(draft))
        self._take(fields, provenance, "experience", self._map_experience(draft))
        self._take(fields, provenance, "technical_skills", self._map_skills(draft))
        self._take(fields, provenance, "projects", self._map_projects(draft))
        self._take(fields, provenance, "certifications", self._map_certifications(draft))
        self._take(fields, provenance, "awards", self._map_awards(draft))

        profile = current.model_copy(update=fields)
        logger.info(
            f"{self.name}: Mapped {len(provenance)} fields",
            source=draft.source.value,
            fields=sorted(provenance),
        )
        return profile, frozenset(provenance)


# Agent instance
field_mapper_agent = FieldMapperAgent()
