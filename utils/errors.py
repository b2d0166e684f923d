"""
Fatal error taxonomy for the resume extraction pipeline.

Only these exceptions reach the caller as failures. Recoverable tier
failures (remote parsing, narrative generation) are returned as values,
see schemas.profile_schemas.
"""


class ResumeExtractionError(Exception):
    """Base class for user-visible extraction failures"""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class UploadValidationError(ResumeExtractionError):
    """Upload rejected before entering the pipeline (wrong type or too large)"""


class DocumentError(ResumeExtractionError):
    """The document itself cannot yield text; there is no further tier"""


class DocumentUnreadable(DocumentError):
    """Binary could not be parsed as a well-formed PDF"""


class DocumentEmpty(DocumentError):
    """Parsing succeeded but produced zero pages"""
