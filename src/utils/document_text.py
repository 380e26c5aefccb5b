"""Plain-text extraction from uploaded registration documents."""

import io
import logging

import pdfplumber
from pdfplumber.utils.exceptions import PdfminerException

from core.exceptions import ValidationError

logger = logging.getLogger(__name__)

MAX_PDF_SIZE = 10 * 1024 * 1024  # 10MB limit for PDF files

TEXT_SUFFIXES = (".txt", ".csv")
SUPPORTED_SUFFIXES = TEXT_SUFFIXES + (".pdf",)


def _pdf_text(data: bytes) -> str:
    if len(data) > MAX_PDF_SIZE:
        raise ValidationError(
            f"PDF file size exceeds maximum allowed size of {MAX_PDF_SIZE // 1024 // 1024}MB"
        )
    if not data.startswith(b"%PDF"):
        raise ValidationError("Invalid PDF file format")

    try:
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            text_parts = []
            for page_num, page in enumerate(pdf.pages, 1):
                # layout=True keeps table columns apart
                text = page.extract_text(layout=True)
                # layout=True pads a blank page with whitespace
                if text and text.strip():
                    text_parts.append(text)
                logger.debug("Extracted text from PDF page %d/%d", page_num, len(pdf.pages))
    except PdfminerException as e:
        raise ValidationError(f"Invalid or corrupted PDF file: {e}") from e

    if not text_parts:
        raise ValidationError(
            "PDF file contains no extractable text. It may be a scanned image."
        )
    return "\n\n".join(text_parts)


def read_document_text(filename: str, data: bytes) -> str:
    """Decode an uploaded .txt, .csv or .pdf file to text.

    Raises:
        ValidationError: For unsupported, undecodable or empty files.
    """
    name = (filename or "").lower()
    if name.endswith(".pdf"):
        return _pdf_text(data)
    if not name.endswith(TEXT_SUFFIXES):
        raise ValidationError("Only .txt, .csv and .pdf files are supported")
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ValidationError("File must be UTF-8 encoded text.") from e
