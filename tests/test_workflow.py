"""
End-to-end tests for the LangGraph extraction workflow

The remote service and the LLM are mocked; PDF decoding and pattern
extraction run for real.
"""
import time
from unittest.mock import Mock, patch

import pytest

from agents import remote_parser_agent
from config import settings
from graph.session import session_store
from graph.workflow import validate_upload, workflow
from schemas.profile_schemas import (
    CanonicalProfile,
    DraftSource,
    ExtractionStage,
    NameField,
    RawDraft,
    RemoteParsingUnavailable,
)
from utils.document_loader import document_loader
from utils.errors import DocumentUnreadable, UploadValidationError
from utils.llm_client import llm_client


REMOTE_DOWN = RemoteParsingUnavailable(cause="Remote parsing service returned HTTP 503")


@pytest.fixture
def remote_down():
    with patch.object(remote_parser_agent, "parse", return_value=REMOTE_DOWN) as mock_parse:
        yield mock_parse


@pytest.fixture
def llm_reply():
    with patch.object(llm_client, "generate",
                      return_value={"content": "I build data pipelines that teams rely on."}) as mock_generate:
        yield mock_generate


# ==================== Happy paths ====================

def test_remote_failure_falls_back_to_local_parsing(resume_pdf_path, session, remote_down, llm_reply):
    result = workflow.process_resume(resume_pdf_path, "application/pdf", session=session)

    assert result is not None
    assert result.source == DraftSource.LOCAL_HEURISTIC
    assert result.profile.email == "jane.doe@example.com"
    assert result.profile.about_me == "I build data pipelines that teams rely on."
    assert {"email", "about_me"} <= result.provenance
    assert result.warnings == [REMOTE_DOWN.cause]

    assert session.stage == ExtractionStage.COMPLETE
    assert session.progress == 100
    assert session.last_error is None
    llm_reply.assert_called_once()


def test_remote_success_skips_local_tier(resume_pdf_path, session, llm_reply):
    draft = RawDraft(
        source=DraftSource.REMOTE_SERVICE,
        name=NameField(raw="Jane Ann Doe"),
        emails=["jane@remote.example"],
        summary="Engineer focused on data platforms.",
    )
    with patch.object(remote_parser_agent, "parse", return_value=draft), \
         patch.object(document_loader, "extract_text") as mock_extract:
        result = workflow.process_resume(resume_pdf_path, "application/pdf", session=session)

    mock_extract.assert_not_called()
    llm_reply.assert_not_called()
    assert result.source == DraftSource.REMOTE_SERVICE
    assert result.profile.about_me == "Engineer focused on data platforms."
    assert result.warnings == []
    assert session.stage == ExtractionStage.COMPLETE


def test_existing_values_survive(resume_pdf_path, session, remote_down, llm_reply):
    current = CanonicalProfile(location="Lisbon", about_me="Written by hand.")
    result = workflow.process_resume(resume_pdf_path, "application/pdf", current_profile=current, session=session)

    assert result.profile.location == "Lisbon"
    assert result.profile.about_me == "Written by hand."
    llm_reply.assert_not_called()


def test_remote_error_body_falls_back_to_local_parsing(resume_pdf_path, session, llm_reply):
    response = Mock(status_code=200)
    response.raise_for_status.return_value = None
    response.json.return_value = {"data": None, "error": {"errorCode": "quota_exceeded", "errorDetail": "Out of credits"}}

    with patch.object(settings, "RESUME_PARSER_API_KEY", "test-key"), \
         patch.object(remote_parser_agent.session, "post", return_value=response):
        result = workflow.process_resume(resume_pdf_path, "application/pdf", session=session)

    assert result.source == DraftSource.LOCAL_HEURISTIC
    assert result.profile.email == "jane.doe@example.com"
    assert any("quota_exceeded" in w for w in result.warnings)
    assert session.stage == ExtractionStage.COMPLETE


# ==================== Narrative fallbacks ====================

def test_narrative_timeout_uses_default_bio(resume_pdf_path, session, remote_down):
    def slow_generate(*args, **kwargs):
        time.sleep(1.0)
        return {"content": "too late"}

    with patch.object(settings, "NARRATIVE_TIMEOUT", 0.05), \
         patch.object(llm_client, "generate", side_effect=slow_generate):
        result = workflow.process_resume(resume_pdf_path, "application/pdf", session=session)

    assert result.profile.about_me == settings.DEFAULT_ABOUT_ME
    assert "about_me" not in result.provenance
    assert any("timed out" in w for w in result.warnings)
    assert session.stage == ExtractionStage.COMPLETE


def test_narrative_failure_uses_default_bio(resume_pdf_path, session, remote_down):
    with patch.object(llm_client, "generate", side_effect=RuntimeError("no provider")):
        result = workflow.process_resume(resume_pdf_path, "application/pdf", session=session)

    assert result.profile.about_me == settings.DEFAULT_ABOUT_ME
    assert session.stage == ExtractionStage.COMPLETE
    assert len(result.warnings) == 2


# ==================== Fatal errors ====================

def test_unreadable_document_ends_in_error(tmp_path, session, remote_down):
    path = tmp_path / "broken.pdf"
    path.write_bytes(b"definitely not a pdf")

    with pytest.raises(DocumentUnreadable):
        workflow.process_resume(path, "application/pdf", session=session)

    assert session.stage == ExtractionStage.ERROR
    assert session.last_error
    assert session.warnings == [REMOTE_DOWN.cause]


def test_validation_failure_before_any_tier(tmp_path, session, remote_down):
    path = tmp_path / "resume.txt"
    path.write_text("plain text resume")

    with pytest.raises(UploadValidationError):
        workflow.process_resume(path, "text/plain", session=session)

    remote_down.assert_not_called()
    assert session.stage == ExtractionStage.ERROR


def test_validate_upload_limits():
    validate_upload("resume.pdf", "application/pdf", 1024)
    validate_upload("resume.pdf", None, 1024)

    with pytest.raises(UploadValidationError):
        validate_upload("resume.docx", None, 1024)
    with pytest.raises(UploadValidationError):
        validate_upload("resume.pdf", "application/pdf", settings.MAX_UPLOAD_BYTES + 1)
    with pytest.raises(UploadValidationError):
        validate_upload("resume.pdf", "application/pdf", 0)


# ==================== Abandonment ====================

def test_abandoned_run_is_discarded(resume_pdf_path, session, llm_reply):
    def abandon_during_remote_call(file_path):
        session.abandon()
        return REMOTE_DOWN

    with patch.object(remote_parser_agent, "parse", side_effect=abandon_during_remote_call), \
         patch.object(document_loader, "extract_text") as mock_extract:
        result = workflow.process_resume(resume_pdf_path, "application/pdf", session=session)

    assert result is None
    mock_extract.assert_not_called()
    llm_reply.assert_not_called()
    assert session.progress == 20
    assert session.stage == ExtractionStage.REMOTE_PARSING


# ==================== Session lifecycle ====================

def test_sessions_are_released_after_each_run(resume_pdf_path, tmp_path, remote_down, llm_reply):
    before = len(session_store)
    workflow.process_resume(resume_pdf_path, "application/pdf")
    workflow.process_resume(resume_pdf_path, "application/pdf")

    broken = tmp_path / "broken.pdf"
    broken.write_bytes(b"definitely not a pdf")
    with pytest.raises(DocumentUnreadable):
        workflow.process_resume(broken, "application/pdf")

    assert len(session_store) == before
