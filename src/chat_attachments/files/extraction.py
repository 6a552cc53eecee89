"""Bounded text extraction from base64 document payloads.

Supports plain-text style MIME types (decoded with charset-normalizer) and PDFs
(read with the optional ``pypdf`` dependency, installed via the ``pdf`` extra).
Every failure is raised as ``ExtractionException``; callers in the attachment
pipeline treat that as "no text extracted".
"""

import base64
import binascii
import io
import logging
from collections.abc import Callable
from typing import Literal

from charset_normalizer import from_bytes
from pydantic import BaseModel, ConfigDict, Field

from chat_attachments.exceptions import ExtractionException
from chat_attachments.files.mime import normalize_mime

logger = logging.getLogger(__name__)

DEFAULT_INPUT_FILE_MAX_BYTES = 5 * 1024 * 1024
DEFAULT_INPUT_FILE_MAX_CHARS = 200_000
DEFAULT_INPUT_FILE_MIMES: tuple[str, ...] = (
    "text/plain",
    "text/markdown",
    "text/html",
    "text/csv",
    "application/json",
    "application/pdf",
)
DEFAULT_INPUT_PDF_MAX_PAGES = 4
DEFAULT_INPUT_PDF_MAX_PIXELS = 4_000_000
DEFAULT_INPUT_PDF_MIN_TEXT_CHARS = 200


class PdfLimits(BaseModel):
    """Ceilings applied when reading PDFs.

    ``max_pixels`` and ``min_text_chars`` bound page rasterization for
    scanned documents. Rasterization is not performed here, so a PDF whose
    text layer is shorter than ``min_text_chars`` returns what text it has.
    """

    model_config = ConfigDict(frozen=True)

    max_pages: int = Field(default=DEFAULT_INPUT_PDF_MAX_PAGES, ge=1)
    max_pixels: int = Field(default=DEFAULT_INPUT_PDF_MAX_PIXELS, ge=1)
    min_text_chars: int = Field(default=DEFAULT_INPUT_PDF_MIN_TEXT_CHARS, ge=0)


class FileExtractionLimits(BaseModel):
    """Limits for one extraction call.

    ``allow_url``, ``max_redirects`` and ``timeout_ms`` describe the URL
    fetch path; attachment extraction always passes base64 sources, so they
    stay at ``False``/``0``.
    """

    model_config = ConfigDict(frozen=True)

    allow_url: bool = False
    allowed_mimes: frozenset[str] = frozenset(DEFAULT_INPUT_FILE_MIMES)
    max_bytes: int = Field(default=DEFAULT_INPUT_FILE_MAX_BYTES, ge=1)
    max_chars: int = Field(default=DEFAULT_INPUT_FILE_MAX_CHARS, ge=1)
    max_redirects: int = Field(default=0, ge=0)
    timeout_ms: int = Field(default=0, ge=0)
    pdf: PdfLimits = Field(default_factory=PdfLimits)


class FileSource(BaseModel):
    """Base64 document source handed to an extractor."""

    type: Literal["base64"] = "base64"
    data: str
    media_type: str
    filename: str | None = None


class ExtractedFileContent(BaseModel):
    """Text recovered from a document."""

    filename: str | None = None
    text: str | None = None


FileExtractor = Callable[[FileSource, FileExtractionLimits], ExtractedFileContent]


def _decode_text(data: bytes) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        pass

    best = from_bytes(data).best()
    if best is not None:
        logger.debug("Detected encoding '%s' for text attachment", best.encoding)
        return str(best)
    return data.decode("utf-8", errors="replace")


def _extract_pdf_text(data: bytes, limits: PdfLimits) -> str:
    try:
        from pypdf import PdfReader
    except ImportError as e:
        raise ExtractionException(
            "PDF extraction requires the optional 'pypdf' dependency",
            mime_type="application/pdf",
            original_error=e,
        ) from e

    reader = PdfReader(io.BytesIO(data))
    pages: list[str] = []
    for page in reader.pages[: limits.max_pages]:
        page_text = page.extract_text() or ""
        if page_text.strip():
            pages.append(page_text.strip())
    text = "\n\n".join(pages)
    if len(text) < limits.min_text_chars:
        logger.debug(
            "PDF text layer below %d chars (%d); returning text only",
            limits.min_text_chars,
            len(text),
        )
    return text


def extract_file_content_from_source(
    source: FileSource, limits: FileExtractionLimits
) -> ExtractedFileContent:
    """Extract bounded text from a base64 document source.

    Args:
        source: The base64 payload, its media type and an optional filename
        limits: Allowed MIME types and byte/char/PDF ceilings

    Returns:
        ExtractedFileContent whose ``text`` is clamped to ``limits.max_chars``

    Raises:
        ExtractionException: If the type is not allowed, the payload is too
            large or undecodable, or the backend fails
    """
    mime = normalize_mime(source.media_type)
    if mime is None or mime not in limits.allowed_mimes:
        raise ExtractionException(
            f"Unsupported file type for extraction: {source.media_type}",
            mime_type=mime,
        )

    try:
        data = base64.b64decode(source.data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ExtractionException(
            "Invalid base64 file source", mime_type=mime, original_error=e
        ) from e
    if len(data) > limits.max_bytes:
        raise ExtractionException(
            f"File too large for extraction ({len(data)} > {limits.max_bytes} bytes)",
            mime_type=mime,
        )

    if mime == "application/pdf":
        try:
            text = _extract_pdf_text(data, limits.pdf)
        except ExtractionException:
            raise
        except Exception as e:
            raise ExtractionException(
                f"Failed to read PDF: {e}", mime_type=mime, original_error=e
            ) from e
    else:
        text = _decode_text(data)

    return ExtractedFileContent(filename=source.filename, text=text[: limits.max_chars])
