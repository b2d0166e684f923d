"""
Remote Parser Agent - Resume parsing through a document-understanding API

First extraction tier. Any failure becomes a RemoteParsingUnavailable
value so the workflow can fall back to local parsing.
"""
import time
from pathlib import Path
from typing import Any, Dict, Union

import requests

from config import settings
from schemas.profile_schemas import (
    DraftSource,
    NameField,
    RawDraft,
    RemoteParseOutcome,
    RemoteParsingUnavailable,
)
from utils.logger import logger


def _as_list(value: Any) -> list:
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


class RemoteParserAgent:
    """
    Agent that uploads the stored resume to the remote parsing service

    One attempt per document, no retry.
    """

    def __init__(self):
        self.name = "RemoteParserAgent"
        self.session = requests.Session()
        logger.info(f"{self.name} initialized", endpoint=settings.RESUME_PARSER_URL)

    def _post(self, file_path: Path) -> Dict[str, Any]:
        headers = {"Authorization": f"Bearer {settings.RESUME_PARSER_API_KEY}"}
        with open(file_path, "rb") as fh:
            response = self.session.post(
                settings.RESUME_PARSER_URL,
                headers=headers,
                files={"file": (file_path.name, fh, "application/pdf")},
                data={"wait": "true"},
                timeout=settings.RESUME_PARSER_TIMEOUT,
            )
        response.raise_for_status()
        return response.json()

    @staticmethod
    def to_draft(payload: Dict[str, Any]) -> RawDraft:
        """
        Map the service's response body onto a RawDraft

        Known fields are copied one-to-one. Anything the service omits
        stays empty.

        Raises:
            ValueError: the body reports a service error or carries no data
        """
        error = payload.get("error")
        if isinstance(error, dict) and (error.get("errorCode") or error.get("errorDetail")):
            raise ValueError(
                f"Service reported {error.get('errorCode') or 'an error'}: {error.get('errorDetail') or ''}".strip()
            )
        if error and not isinstance(error, dict):
            raise ValueError(f"Service reported an error: {error}")

        data = payload.get("data")
        if data is None:
            raise ValueError("Response carries no parsed data")
        if not isinstance(data, dict):
            raise ValueError(f"Response data is a {type(data).__name__}, expected an object")
        name = data.get("name") or {}
        location = data.get("location") or ""

        return RawDraft(
            source=DraftSource.REMOTE_SERVICE,
            name=NameField(raw=_as_str(name.get("raw")) if isinstance(name, dict) else _as_str(name)),
            emails=[e for e in _as_list(data.get("emails")) if isinstance(e, str)],
            phone_numbers=[p for p in _as_list(data.get("phoneNumbers")) if isinstance(p, str)],
            websites=[w for w in _as_list(data.get("websites")) if isinstance(w, str)],
            linkedin=_as_str(data.get("linkedin")),
            profession=_as_str(data.get("profession")),
            location=location if isinstance(location, (str, dict)) else "",
            summary=_as_str(data.get("summary")),
            objective=_as_str(data.get("objective")),
            education=[e for e in _as_list(data.get("education")) if isinstance(e, dict)],
            work_experience=[w for w in _as_list(data.get("workExperience")) if isinstance(w, dict)],
            skills=_as_list(data.get("skills")),
            certifications=_as_list(data.get("certifications")),
            sections=[s for s in _as_list(data.get("sections")) if isinstance(s, dict)],
        )

    def parse(self, file_path: Union[str, Path]) -> RemoteParseOutcome:
        """
        Parse a stored resume with the remote service

        Args:
            file_path: Path of the stored upload

        Returns:
            RawDraft tagged remote-service, or RemoteParsingUnavailable
        """
        if not settings.RESUME_PARSER_API_KEY:
            logger.info(f"{self.name}: RESUME_PARSER_API_KEY not configured, skipping remote parsing")
            return RemoteParsingUnavailable(cause="Remote parsing service is not configured")

        file_path = Path(file_path)
        start_time = time.time()
        try:
            payload = self._post(file_path)
            if not isinstance(payload, dict):
                raise ValueError("Response body is not a JSON object")
            draft = self.to_draft(payload)
        except requests.Timeout:
            logger.warning(f"{self.name}: Remote parsing timed out", timeout=settings.RESUME_PARSER_TIMEOUT)
            return RemoteParsingUnavailable(
                cause=f"Remote parsing timed out after {settings.RESUME_PARSER_TIMEOUT}s"
            )
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            logger.warning(f"{self.name}: Remote parsing rejected", status_code=status)
            return RemoteParsingUnavailable(cause=f"Remote parsing service returned HTTP {status}")
        except (requests.RequestException, ValueError, TypeError, AttributeError, OSError) as e:
            logger.warning(f"{self.name}: Remote parsing failed: {type(e).__name__}: {e}")
            return RemoteParsingUnavailable(cause=f"Remote parsing failed: {e}")

        logger.info(
            f"{self.name}: Remote parsing succeeded",
            latency=round(time.time() - start_time, 2),
            name_found=bool(draft.name.raw),
            experience=len(draft.work_experience),
        )
        return draft


# Agent instance
remote_parser_agent = RemoteParserAgent()
