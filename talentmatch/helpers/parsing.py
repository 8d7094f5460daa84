import io
import re
from pathlib import Path
from typing import Optional

from docx import Document
from pdfminer.high_level import extract_text as pdf_extract

from talentmatch.models.models import ExtractedDocument
from talentmatch.utils.logging_config import get_logger

logger = get_logger(__name__)

SUPPORTED_EXTENSIONS = (".pdf", ".docx", ".txt")
MAX_FILE_SIZE = 5 * 1024 * 1024  # 5MB

DEFAULT_TITLE = "Unspecified Position"
ERROR_TITLE = "Candidate"

TITLE_PATTERN = re.compile(
    r'(?:senior|junior|lead)?\s*(?:software|frontend|backend|fullstack|web)\s*(?:developer|engineer|architect)',
    re.IGNORECASE,
)


def read_txt(data: bytes) -> str:
    return data.decode("utf-8", errors="ignore")


def read_docx(data: bytes) -> str:
    doc = Document(io.BytesIO(data))
    return "\n".join([p.text for p in doc.paragraphs])


def read_pdf(data: bytes) -> str:
    return pdf_extract(io.BytesIO(data))


def clean_text(x: str) -> str:
    x = re.sub(r'\s+', ' ', x).strip()
    return x


def guess_title(text: str) -> Optional[str]:
    """Look for a developer/engineer title in the first ten lines"""
    first_lines = " ".join(text.split("\n")[:10])
    match = TITLE_PATTERN.search(first_lines)
    return clean_text(match.group(0)) if match else None


def extract_document(data: bytes, filename: str) -> ExtractedDocument:
    """Plain text and a title guess for an uploaded résumé.

    Never raises: failures come back as an explanatory text so the upload
    itself can still be stored.
    """
    ext = Path(filename or "").suffix.lower()
    try:
        if ext == ".pdf":
            text = read_pdf(data)
        elif ext == ".docx":
            text = read_docx(data)
        elif ext == ".txt":
            text = read_txt(data)
        else:
            raise ValueError(f"Unsupported file type '{ext or filename}'")
    except Exception as e:
        logger.error(f"Document processing error for {filename}: {e}")
        return ExtractedDocument(
            text=f"Error processing file: {e}. Please check server logs for details.",
            title_guess=ERROR_TITLE,
        )

    logger.info(f"Extracted {len(text)} characters from {filename}")
    return ExtractedDocument(text=text.strip(), title_guess=guess_title(text) or DEFAULT_TITLE)
