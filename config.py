"""
Configuration Management for Resume Extraction Pipeline
"""
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).parent / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Project Paths
    PROJECT_ROOT: Path = Path(__file__).parent
    DATA_DIR: Path = PROJECT_ROOT / "data"
    UPLOAD_DIR: Path = DATA_DIR / "uploads"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"

    # Upload validation (checked before the pipeline starts)
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024  # 5MB
    ALLOWED_CONTENT_TYPES: list[str] = ["application/pdf"]

    # Remote resume parsing service (document-understanding API)
    RESUME_PARSER_URL: str = "https://api.affinda.com/v2/resumes"
    RESUME_PARSER_API_KEY: Optional[str] = None
    RESUME_PARSER_TIMEOUT: int = 60  # Single attempt, no retry; local parsing takes over on failure

    # Narrative (About Me) generation
    NARRATIVE_TIMEOUT: float = 30.0  # Client-side deadline, independent of provider timeouts
    NARRATIVE_PROMPT_MAX_CHARS: int = 1000
    NARRATIVE_MAX_ITEMS: int = 3  # Education / experience entries included in the prompt
    NARRATIVE_MAX_SKILLS: int = 10
    NARRATIVE_MAX_TOKENS: int = 120
    NARRATIVE_TEMPERATURE: float = 0.7
    DEFAULT_ABOUT_ME: str = (
        "I'm a passionate and driven professional eager to make an impact in my field."
    )

    # Groq API Configuration (PRIMARY text-generation provider)
    GROQ_API_KEY: Optional[str] = None
    GROQ_MODEL: str = "llama-3.1-8b-instant"
    GROQ_TIMEOUT: int = 25  # Below NARRATIVE_TIMEOUT so the provider gives up first when it can

    # HuggingFace Inference API (fallback provider)
    HF_API_KEY: Optional[str] = None
    HF_MODEL: str = "meta-llama/Llama-3.1-8B-Instruct"
    HF_TIMEOUT: int = 25

    # Local pattern extraction
    NAME_SCAN_LINES: int = 5

    # API Configuration
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    API_RELOAD: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"  # json or text (file handler only)

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._create_directories()

    def _create_directories(self) -> None:
        """Create necessary directories if they don't exist"""
        for directory in [
            self.DATA_DIR,
            self.UPLOAD_DIR,
            self.LOGS_DIR,
        ]:
            directory.mkdir(parents=True, exist_ok=True)


# Global settings instance
settings = Settings()
