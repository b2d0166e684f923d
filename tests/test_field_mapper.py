"""
Tests for RawDraft -> CanonicalProfile mapping
"""
from agents.field_mapper_agent import field_mapper_agent
from agents.remote_parser_agent import RemoteParserAgent
from schemas.profile_schemas import (
    CanonicalProfile,
    CertificationEntry,
    DraftSource,
    EducationEntry,
    NameField,
    RawDraft,
)


def _draft(**fields) -> RawDraft:
    return RawDraft(source=DraftSource.LOCAL_HEURISTIC, **fields)


# ==================== Non-destructive merge ====================

def test_empty_draft_never_blanks_existing_values():
    current = CanonicalProfile(
        full_name="Existing Name",
        email="old@example.com",
        about_me="Already written.",
        technical_skills=["Rust"],
        education=[EducationEntry(degree="BSc")],
    )
    profile, provenance = field_mapper_agent.map(_draft(), current)

    assert profile == current
    assert provenance == frozenset()


def test_draft_values_replace_and_are_recorded():
    current = CanonicalProfile(full_name="Old Name", phone="000", github_url="https://github.com/old")
    draft = _draft(
        name=NameField(raw="Jane Ann Doe"),
        emails=["jane@x.com", "other@x.com"],
        phone_numbers=[],
    )
    profile, provenance = field_mapper_agent.map(draft, current)

    assert profile.full_name == "Jane Ann Doe"
    assert profile.email == "jane@x.com"
    assert profile.phone == "000"
    assert profile.github_url == "https://github.com/old"
    assert provenance == frozenset({"full_name", "email"})


def test_map_without_current_profile():
    profile, provenance = field_mapper_agent.map(_draft(emails=["a@b.co"]))
    assert profile.email == "a@b.co"
    assert provenance == frozenset({"email"})


# ==================== Derivations ====================

def test_websites_are_classified():
    draft = _draft(websites=["https://linkedin.com/in/jane", "https://medium.com/@jane"])
    profile, provenance = field_mapper_agent.map(draft)

    assert profile.linkedin_url == "https://linkedin.com/in/jane"
    assert profile.blog_url == "https://medium.com/@jane"
    assert {"linkedin_url", "blog_url"} <= provenance


def test_preclassified_link_wins_over_websites():
    draft = _draft(linkedin="https://linkedin.com/in/first", websites=["https://linkedin.com/in/second"])
    profile, _ = field_mapper_agent.map(draft)
    assert profile.linkedin_url == "https://linkedin.com/in/first"


def test_current_role_falls_back_to_first_job_title():
    draft = _draft(work_experience=[{"jobTitle": "Data Engineer", "organization": "Acme"}])
    profile, _ = field_mapper_agent.map(draft)
    assert profile.current_role == "Data Engineer"

    draft = _draft(profession="Architect", work_experience=[{"jobTitle": "Data Engineer"}])
    profile, _ = field_mapper_agent.map(draft)
    assert profile.current_role == "Architect"


def test_location_shapes():
    assert field_mapper_agent.map(_draft(location={"formatted": "Berlin, Germany"}))[0].location == "Berlin, Germany"
    assert field_mapper_agent.map(_draft(location={"city": "Pune"}))[0].location == "Pune"
    assert field_mapper_agent.map(_draft(location="Lisbon"))[0].location == "Lisbon"


def test_bio_fields():
    profile, _ = field_mapper_agent.map(_draft(objective="Seeking backend roles.", tagline="Builder"))
    assert profile.short_bio == "Seeking backend roles."
    assert profile.about_me == "Seeking backend roles."

    profile, _ = field_mapper_agent.map(_draft(tagline="Builder"))
    assert profile.short_bio == "Builder"
    assert profile.about_me == ""


# ==================== Lists ====================

def test_education_from_remote_shape():
    draft = _draft(education=[
        {
            "organization": "TU Berlin",
            "accreditation": {"education": "MSc Informatics"},
            "dates": {"startDate": "2016-10-01", "completionDate": "2018-09-30"},
            "grade": {"value": "1.3", "metric": "GPA"},
        },
        {"organization": "", "accreditation": {}},
    ])
    profile, provenance = field_mapper_agent.map(draft)

    assert len(profile.education) == 1
    entry = profile.education[0]
    assert entry.degree == "MSc Informatics"
    assert entry.institution == "TU Berlin"
    assert entry.start_year == "2016"
    assert entry.end_year == "2018"
    assert entry.cgpa == "1.3"
    assert "education" in provenance


def test_experience_from_remote_shape():
    draft = _draft(work_experience=[{
        "jobTitle": "Backend Engineer",
        "organization": "Acme",
        "dates": {"startDate": "2020-01-01", "isCurrent": True},
        "jobDescription": "APIs and queues.",
    }])
    profile, _ = field_mapper_agent.map(draft)
    job = profile.experience[0]
    assert (job.job_title, job.organization, job.start_date, job.end_date) == (
        "Backend Engineer", "Acme", "2020-01-01", "Present"
    )
    assert job.description == "APIs and queues."


def test_skills_accept_strings_and_objects():
    draft = _draft(skills=["Python", {"name": "Go"}, {"name": ""}, "Python"])
    profile, _ = field_mapper_agent.map(draft)
    assert profile.technical_skills == ["Python", "Go"]


def test_projects_recovered_from_remote_sections():
    draft = RemoteParserAgent.to_draft({"data": {
        "sections": [
            {"sectionType": "Summary", "text": "Not projects"},
            {"sectionType": "Projects", "text": "Ledger\nDouble-entry accounting service written in Go with an append-only event store"},
        ]
    }})
    profile, provenance = field_mapper_agent.map(draft)

    assert [p.name for p in profile.projects] == ["Ledger"]
    assert profile.projects[0].description == "Double-entry accounting service written in Go with an append-only event store"
    assert "projects" in provenance


def test_certifications_from_raw_lines_are_paired():
    draft = _draft(certifications=[
        "AWS Certified Developer",
        "View Certificate: https://aws.example.com/cert/1",
        {"name": "CKA", "link": "https://cncf.example.com/cka"},
    ])
    profile, _ = field_mapper_agent.map(draft)
    assert profile.certifications == [
        CertificationEntry(name="AWS Certified Developer", link="https://aws.example.com/cert/1"),
        CertificationEntry(name="CKA", link="https://cncf.example.com/cka"),
    ]


def test_profile_serializes_with_form_field_names():
    profile, _ = field_mapper_agent.map(_draft(name=NameField(raw="Jane Doe"), linkedin="https://linkedin.com/in/j"))
    dumped = profile.model_dump(by_alias=True)
    assert dumped["fullName"] == "Jane Doe"
    assert dumped["linkedinUrl"] == "https://linkedin.com/in/j"
    assert dumped["technicalSkills"] == []


# ==================== Loosely shaped remote entries ====================

def test_scalar_remote_education_fields_do_not_break_mapping():
    draft = RemoteParserAgent.to_draft({"data": {"education": [
        {"accreditation": "BSc Physics", "organization": "MIT", "grade": "3.8", "dates": "2014 - 2018"},
    ]}})
    profile, provenance = field_mapper_agent.map(draft)

    entry = profile.education[0]
    assert entry.degree == "BSc Physics"
    assert entry.institution == "MIT"
    assert entry.percentage == "3.8"
    assert (entry.start_year, entry.end_year) == ("2014", "2018")
    assert "education" in provenance


def test_string_experience_dates_are_split():
    draft = RemoteParserAgent.to_draft({"data": {"workExperience": [
        {"jobTitle": "Engineer", "organization": "Acme", "dates": "2019 - 2021"},
    ]}})
    profile, _ = field_mapper_agent.map(draft)

    assert profile.experience[0].start_date == "2019"
    assert profile.experience[0].end_date == "2021"
