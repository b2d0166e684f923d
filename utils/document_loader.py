"""
LangChain-based PDF text extraction
Decodes a resume PDF page by page into linear text
"""
import re
from pathlib import Path
from typing import Iterator, List, Union

from langchain_core.documents import Document
from langchain_core.documents.base import Blob
from langchain_community.document_loaders.parsers import PyPDFParser
from pydantic import BaseModel, Field

from utils.errors import DocumentEmpty, DocumentUnreadable
from utils.logger import logger


_HORIZONTAL_WS_RE = re.compile(r"[ \t\f\v\u00a0]+")


class ExtractedText(BaseModel):
    """Text of a PDF, one entry per page in page order"""
    pages: List[str] = Field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def text(self) -> str:
        return "\n".join(self.pages)


class PDFTextExtractor:
    """
    Turns a PDF binary into linear text.

    Pages are decoded lazily and sequentially, so only one page's text
    objects are alive at a time. No resume semantics live here.
    """

    PDF_MIME_TYPE = "application/pdf"

    def __init__(self):
        self.parser = PyPDFParser()
        logger.info("PDFTextExtractor initialized")

    def _to_blob(self, source: Union[bytes, str, Path]) -> Blob:
        if isinstance(source, (bytes, bytearray)):
            return Blob.from_data(bytes(source), mime_type=self.PDF_MIME_TYPE)
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        return Blob.from_path(path, mime_type=self.PDF_MIME_TYPE)

    @staticmethod
    def _normalize_page(page_content: str) -> str:
        """Collapse runs of horizontal whitespace inside each line to one space"""
        lines = [_HORIZONTAL_WS_RE.sub(" ", line).strip() for line in page_content.splitlines()]
        return "\n".join(lines).strip()

    def iter_pages(self, source: Union[bytes, str, Path]) -> Iterator[Document]:
        """
        Yield one Document per page, in page order

        Raises:
            DocumentUnreadable if the binary is not a well-formed PDF
        """
        blob = self._to_blob(source)
        try:
            yield from self.parser.lazy_parse(blob)
        except Exception as e:
            logger.error(f"PDF decoding failed: {e}", source=blob.source or "<bytes>")
            raise DocumentUnreadable(
                "The uploaded file could not be read as a PDF document.",
                details={"cause": str(e)},
            ) from e

    def extract(self, source: Union[bytes, str, Path]) -> ExtractedText:
        """
        Extract text from every page

        Args:
            source: PDF bytes or path to a stored PDF

        Returns:
            ExtractedText with one normalized string per page

        Raises:
            DocumentUnreadable: not a parseable PDF
            DocumentEmpty: the document has zero pages
        """
        pages = [self._normalize_page(doc.page_content) for doc in self.iter_pages(source)]

        if not pages:
            logger.warning("PDF produced zero pages")
            raise DocumentEmpty("The uploaded PDF does not contain any pages.")

        extracted = ExtractedText(pages=pages)
        logger.info(
            f"PDF decoded: {extracted.page_count} pages, {len(extracted.text)} characters"
        )
        return extracted

    def extract_text(self, source: Union[bytes, str, Path]) -> str:
        """Extract and join all pages in one step"""
        return self.extract(source).text


# Global instance
document_loader = PDFTextExtractor()
