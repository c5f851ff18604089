import io
import logging
from typing import Any
from pypdf import PdfReader
from pypdf.errors import PyPdfError
from thesisflow.core.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

PDF_MIME = "application/pdf"
TEXT_MIME = "text/plain"
SUPPORTED_MIME_TYPES = {PDF_MIME, TEXT_MIME}

_CHUNK_SIZE = 8192


class DocumentTooLarge(Exception):
    pass


class UnsupportedDocumentType(Exception):
    pass


class DocumentExtractionError(Exception):
    pass


def normalize_mime_type(content_type: str | None) -> str:
    # "text/plain; charset=utf-8" -> "text/plain"
    return (content_type or "").split(";", 1)[0].strip().lower()


async def read_upload(upload_file: Any, max_size: int | None = None) -> bytes:
    """Read an upload in chunks, giving up as soon as it exceeds ``max_size``."""
    limit = max_size if max_size is not None else settings.max_upload_bytes
    buffer = bytearray()
    while chunk := await upload_file.read(_CHUNK_SIZE):
        buffer.extend(chunk)
        if len(buffer) > limit:
            raise DocumentTooLarge(f"File exceeds {limit} bytes")
    return bytes(buffer)


def extract_text(data: bytes, mime_type: str) -> str:
    """
    Turn raw upload bytes into storable plain text.

    PDFs go through pypdf page by page; plain text is decoded as UTF-8 with
    replacement characters for invalid bytes. Null bytes are stripped because
    PostgreSQL text columns reject them.
    """
    mime_type = normalize_mime_type(mime_type)
    if mime_type not in SUPPORTED_MIME_TYPES:
        raise UnsupportedDocumentType(mime_type or "unknown")

    if mime_type == PDF_MIME:
        text = _extract_pdf_text(data)
    else:
        text = data.decode("utf-8", errors="replace")

    return text.replace("\x00", "")


def _extract_pdf_text(data: bytes) -> str:
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
    except (PyPdfError, ValueError, KeyError, TypeError) as e:
        logger.warning("PDF text extraction failed: %s", e)
        raise DocumentExtractionError("Could not read PDF") from e
    return "\n".join(pages)
