"""
Shared fixtures: sample resume text and in-memory PDFs
"""
import io
from typing import List

import pytest
from pypdf import PdfWriter

from graph.session import ExtractionSession


SAMPLE_RESUME_LINES = [
    "Jane Ann Doe",
    "Software Engineer",
    "jane.doe@example.com | +1 (555) 123-4567",
    "https://linkedin.com/in/janedoe https://github.com/janedoe https://janedoe.dev",
    "Experience",
    "Senior Software Engineer",
    "Acme Corp",
    "Jan 2020 - Present",
    "Built distributed data pipelines in Python and Docker running on AWS.",
    "Education",
    "B.Tech in Computer Science, IIT Delhi, 2014 - 2018",
    "CGPA: 8.7/10",
    "Projects",
    "Resume Parser",
    "Parses PDF resumes into structured candidate profiles for the onboarding flow.",
    "Technologies: Python, FastAPI",
    "Certifications",
    "AWS Certified Developer",
    "View Certificate: https://aws.example.com/cert/123",
    "Skills",
    "Python, React, Docker, Kubernetes, CI/CD",
]


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def make_text_pdf(pages: List[List[str]]) -> bytes:
    """
    Build a minimal PDF with one text line per entry, Helvetica, one page per list

    Object layout: 1 catalog, 2 page tree, 3 font, then (page, content) pairs.
    """
    objects = {
        1: b"<< /Type /Catalog /Pages 2 0 R >>",
        3: b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    }
    kids = []
    for i, lines in enumerate(pages):
        page_id = 4 + 2 * i
        content_id = page_id + 1
        kids.append(f"{page_id} 0 R")

        ops = ["BT", "/F1 11 Tf", "14 TL", "72 740 Td"]
        ops.extend(f"({_escape(line)}) Tj T*" for line in lines)
        ops.append("ET")
        stream = "\n".join(ops).encode("latin-1")

        objects[page_id] = (
            f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            f"/Resources << /Font << /F1 3 0 R >> >> /Contents {content_id} 0 R >>"
        ).encode("latin-1")
        objects[content_id] = b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream"
    objects[2] = f"<< /Type /Pages /Kids [{' '.join(kids)}] /Count {len(pages)} >>".encode("latin-1")

    out = bytearray(b"%PDF-1.4\n")
    offsets = {}
    for number in sorted(objects):
        offsets[number] = len(out)
        out += f"{number} 0 obj\n".encode("latin-1") + objects[number] + b"\nendobj\n"

    xref_offset = len(out)
    size = max(objects) + 1
    out += f"xref\n0 {size}\n".encode("latin-1")
    out += b"0000000000 65535 f \n"
    for number in range(1, size):
        out += f"{offsets[number]:010d} 00000 n \n".encode("latin-1")
    out += f"trailer\n<< /Size {size} /Root 1 0 R >>\nstartxref\n{xref_offset}\n%%EOF\n".encode("latin-1")
    return bytes(out)


def make_blank_pdf(page_count: int) -> bytes:
    """PDF with the given number of blank pages, written by pypdf"""
    writer = PdfWriter()
    for _ in range(page_count):
        writer.add_blank_page(width=612, height=792)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


# ==================== Fixtures ====================

@pytest.fixture
def sample_resume_text():
    """Resume text with one line per visual line"""
    return "\n".join(SAMPLE_RESUME_LINES)


@pytest.fixture
def resume_pdf_path(tmp_path):
    """Sample resume split over two pages"""
    path = tmp_path / "resume.pdf"
    path.write_bytes(make_text_pdf([SAMPLE_RESUME_LINES[:9], SAMPLE_RESUME_LINES[9:]]))
    return path


@pytest.fixture
def session():
    return ExtractionSession()


@pytest.fixture
def text_pdf():
    """Factory: list of pages (each a list of lines) -> PDF bytes"""
    return make_text_pdf


@pytest.fixture
def blank_pdf():
    """Factory: page count -> PDF bytes"""
    return make_blank_pdf
