import io
import logging
import os
from typing import Callable, Dict, Optional

import docx
from pypdf import PdfReader

from app.core.exceptions import ExtractionFailedError, UnsupportedFormatError

logger = logging.getLogger(__name__)

TEXT_PLAIN = "text/plain"
PDF = "application/pdf"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

# Used only when the client sends a generic content type
EXTENSION_FORMATS = {
    ".txt": TEXT_PLAIN,
    ".pdf": PDF,
    ".docx": DOCX,
}
GENERIC_CONTENT_TYPES = {"", "application/octet-stream"}


def _extract_plain_text(content: bytes) -> str:
    return content.decode("utf-8-sig", errors="replace")


def _extract_pdf_text(content: bytes) -> str:
    """Extracts text page by page, one line break between pages."""
    reader = PdfReader(io.BytesIO(content))
    return "\n".join(page.extract_text() or "" for page in reader.pages)


def _extract_docx_text(content: bytes) -> str:
    """Extracts paragraph text, separated by blank lines."""
    document = docx.Document(io.BytesIO(content))
    return "\n\n".join(paragraph.text for paragraph in document.paragraphs)


EXTRACTORS: Dict[str, Callable[[bytes], str]] = {
    TEXT_PLAIN: _extract_plain_text,
    PDF: _extract_pdf_text,
    DOCX: _extract_docx_text,
}


def resolve_format(content_type: Optional[str], filename: Optional[str] = None) -> str:
    """Determines the declared format of an upload.

    The content type sent by the client wins. The file extension is only
    consulted when the content type is missing or generic.

    Args:
        content_type (Optional[str]): The upload's content type.
        filename (Optional[str]): The upload's file name.

    Returns:
        str: A MIME type, which may still be unsupported.
    """
    declared = (content_type or "").split(";")[0].strip().lower()
    if declared not in GENERIC_CONTENT_TYPES or not filename:
        return declared

    extension = os.path.splitext(filename)[1].lower()
    return EXTENSION_FORMATS.get(extension, declared)


def extract_text(content: bytes, declared_format: str) -> str:
    """Extracts the text of a document.

    Args:
        content (bytes): The raw document.
        declared_format (str): MIME type declared by the caller.

    Returns:
        str: The extracted text, possibly empty.

    Raises:
        UnsupportedFormatError: If there is no extractor for the format.
        ExtractionFailedError: If the document could not be parsed.
    """
    extractor = EXTRACTORS.get(declared_format)
    if extractor is None:
        raise UnsupportedFormatError(declared_format)

    try:
        return extractor(content)
    except Exception as e:
        logger.error("Extraction Error (%s): %s", declared_format, e)
        raise ExtractionFailedError(
            "Failed to read the document. The file may be corrupted."
        ) from e
