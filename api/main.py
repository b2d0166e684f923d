"""
FastAPI Server for Resume Extraction API
"""
import asyncio
import uuid
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import FastAPI, File, Form, HTTPException, Response, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ValidationError

from agents import narrative_agent
from config import settings
from graph.session import session_store
from graph.workflow import validate_upload, workflow
from schemas.profile_schemas import CanonicalProfile, SessionStatus
from utils.errors import DocumentError, UploadValidationError
from utils.llm_client import llm_client
from utils.logger import logger


# Response models
class UploadResponse(BaseModel):
    """Profile patch for the form layer"""
    sessionId: str
    filePath: str
    profile: dict
    provenance: List[str]
    source: Optional[str] = None
    warnings: List[str]
    status: SessionStatus


class AboutMeResponse(BaseModel):
    aboutMe: str
    warning: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    timestamp: str
    llm_available: bool
    remote_parser_configured: bool


# Create FastAPI app
app = FastAPI(
    title="Resume Extraction Service",
    description="Turns an uploaded PDF resume into a structured profile with LangGraph",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    """Initialize on startup"""
    logger.info("FastAPI server starting up")
    workflow.compile()


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("FastAPI server shutting down")


@app.get("/", response_model=Dict[str, str])
async def root():
    """Root endpoint"""
    return {
        "service": "Resume Extraction Service",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint"""
    return HealthResponse(
        status="healthy",
        version="1.0.0",
        timestamp=datetime.utcnow().isoformat(),
        llm_available=llm_client.is_available(),
        remote_parser_configured=bool(settings.RESUME_PARSER_API_KEY),
    )


def _parse_current_profile(raw: Optional[str]) -> CanonicalProfile:
    if not raw:
        return CanonicalProfile()
    try:
        return CanonicalProfile.model_validate_json(raw)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid currentProfile: {e.errors()[0]['msg']}")


@app.post("/resume/upload", response_model=UploadResponse)
async def upload_resume(
    resume: UploadFile = File(...),
    currentProfile: Optional[str] = Form(None),
    sessionId: Optional[str] = Form(None),
):
    """
    Upload a PDF resume and extract a profile from it

    Args:
        resume: The PDF file
        currentProfile: JSON of values already in the form; kept where extraction finds nothing
        sessionId: Optional client-chosen id for polling progress during the upload

    Returns:
        UploadResponse
    """
    current_profile = _parse_current_profile(currentProfile)
    # One byte past the limit is enough to reject an oversized upload
    contents = await resume.read(settings.MAX_UPLOAD_BYTES + 1)
    filename = resume.filename or "resume.pdf"
    logger.info(f"API: Upload received: {filename}", size=len(contents))

    try:
        validate_upload(filename, resume.content_type, len(contents))
    except UploadValidationError as e:
        logger.warning(f"API: Upload rejected: {e.message}", **e.details)
        raise HTTPException(status_code=400, detail=e.message)

    settings.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
    file_path = settings.UPLOAD_DIR / f"{uuid.uuid4().hex}.pdf"
    with open(file_path, "wb") as f:
        f.write(contents)
    logger.info(f"API: File saved to {file_path}")

    session = session_store.create(sessionId)

    # Run workflow in executor to avoid blocking
    loop = asyncio.get_event_loop()
    try:
        result = await loop.run_in_executor(
            None,
            workflow.process_resume,
            file_path,
            resume.content_type,
            current_profile,
            session,
        )
    except UploadValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except DocumentError as e:
        raise HTTPException(status_code=422, detail=e.message)
    except Exception as e:
        logger.error(f"API: Processing failed: {e}", exc_info=True)
        session.fail("Resume processing failed")
        raise HTTPException(status_code=500, detail="Resume processing failed")

    if result is None:
        raise HTTPException(status_code=409, detail="Upload was cancelled")

    logger.info(
        "API: Resume processing complete",
        session_id=result.session_id,
        source=result.source.value if result.source else None,
        warnings=len(result.warnings),
    )
    return UploadResponse(
        sessionId=result.session_id,
        filePath=result.file_path,
        profile=result.profile.model_dump(by_alias=True),
        provenance=sorted(result.provenance),
        source=result.source.value if result.source else None,
        warnings=result.warnings,
        status=session.to_status(),
    )


@app.post("/resume/generate-about-me", response_model=AboutMeResponse)
async def generate_about_me(profile: CanonicalProfile):
    """Generate only the About Me narrative for the supplied profile"""
    loop = asyncio.get_event_loop()
    outcome = await loop.run_in_executor(None, narrative_agent.generate, profile)
    about_me, warning = narrative_agent.resolve(outcome)
    return AboutMeResponse(aboutMe=about_me, warning=warning)


@app.get("/resume/sessions/{session_id}")
async def get_session(session_id: str):
    """Progress/status of an upload"""
    session = session_store.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
    return session.to_status().model_dump(mode="json", by_alias=True)


@app.delete("/resume/sessions/{session_id}", status_code=204)
async def abandon_session(session_id: str):
    """Abandon an upload; its result is discarded when the run finishes"""
    if not session_store.abandon(session_id):
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
    return Response(status_code=204)


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting FastAPI server on {settings.API_HOST}:{settings.API_PORT}")

    uvicorn.run(
        "api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.API_RELOAD,
        log_level=settings.LOG_LEVEL.lower(),
    )
