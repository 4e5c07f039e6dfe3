import io
import logging
import re

import PyPDF2
from PyPDF2.errors import PdfReadError

logger = logging.getLogger(__name__)

MAX_PAGES = 5  # LinkedIn exports put everything useful on the first pages
MIN_TEXT_LENGTH = 100


class PdfTextError(ValueError):
    pass


def extract_pdf_text(pdf_bytes: bytes, max_pages: int = MAX_PAGES) -> str:
    """Extract text from the first pages of a PDF with whitespace collapsed"""
    try:
        reader = PyPDF2.PdfReader(io.BytesIO(pdf_bytes))
        text_parts = []
        for page in reader.pages[:max_pages]:
            text_parts.append(page.extract_text() or "")
    except (PdfReadError, ValueError) as e:
        logger.error(f"❌ Could not read PDF: {e}")
        raise PdfTextError(f"Could not read PDF: {e}") from e

    text = re.sub(r"\s+", " ", "\n".join(text_parts)).strip()
    logger.info(f"📄 Extracted {len(text)} characters from {min(len(reader.pages), max_pages)} page(s)")
    return text


def extract_profile_text(pdf_bytes: bytes) -> str:
    """Extract text and reject PDFs too thin to describe a profile"""
    text = extract_pdf_text(pdf_bytes)
    if len(text) < MIN_TEXT_LENGTH:
        raise PdfTextError("PDF contains insufficient text content")
    return text
