"""Configuration utilities for environment-based setup."""

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from chat_attachments.exceptions import ConfigurationException
from chat_attachments.files.extraction import (
    DEFAULT_INPUT_FILE_MAX_BYTES,
    DEFAULT_INPUT_FILE_MAX_CHARS,
    DEFAULT_INPUT_FILE_MIMES,
    DEFAULT_INPUT_PDF_MAX_PAGES,
    DEFAULT_INPUT_PDF_MAX_PIXELS,
    DEFAULT_INPUT_PDF_MIN_TEXT_CHARS,
    FileExtractionLimits,
    PdfLimits,
)
from chat_attachments.files.mime import normalize_mime_list

CHAT_ATTACHMENT_MAX_BYTES = 5_000_000
EXTRACTED_TEXT_MAX_CHARS = 80_000

_INT_ENV_VARS: dict[str, str] = {
    "max_bytes": "CHAT_ATTACHMENT_MAX_BYTES",
    "file_max_bytes": "CHAT_ATTACHMENT_FILE_MAX_BYTES",
    "file_max_chars": "CHAT_ATTACHMENT_FILE_MAX_CHARS",
    "pdf_max_pages": "CHAT_ATTACHMENT_PDF_MAX_PAGES",
    "pdf_max_pixels": "CHAT_ATTACHMENT_PDF_MAX_PIXELS",
    "pdf_min_text_chars": "CHAT_ATTACHMENT_PDF_MIN_TEXT_CHARS",
}


class AttachmentSettings(BaseModel):
    """Limits and storage options for attachment parsing.

    Attributes:
        max_bytes: Maximum decoded size of a single attachment
        save_dir: Directory for persisted non-image attachments (None disables
            persistence)
        file_max_bytes: Byte ceiling for text extraction
        file_max_chars: Character ceiling applied by the extractor
        allowed_mimes: MIME types eligible for text extraction
        pdf_max_pages: Pages read from a PDF
        pdf_max_pixels: Pixel budget for PDF page rendering
        pdf_min_text_chars: Text-layer length below which a PDF counts as scanned
        extracted_text_max_chars: Ceiling for text inlined into the message
    """

    max_bytes: int = Field(default=CHAT_ATTACHMENT_MAX_BYTES, ge=1)
    save_dir: Path | None = None
    file_max_bytes: int = Field(default=DEFAULT_INPUT_FILE_MAX_BYTES, ge=1)
    file_max_chars: int = Field(default=DEFAULT_INPUT_FILE_MAX_CHARS, ge=1)
    allowed_mimes: frozenset[str] = frozenset(DEFAULT_INPUT_FILE_MIMES)
    pdf_max_pages: int = Field(default=DEFAULT_INPUT_PDF_MAX_PAGES, ge=1)
    pdf_max_pixels: int = Field(default=DEFAULT_INPUT_PDF_MAX_PIXELS, ge=1)
    pdf_min_text_chars: int = Field(default=DEFAULT_INPUT_PDF_MIN_TEXT_CHARS, ge=0)
    extracted_text_max_chars: int = Field(default=EXTRACTED_TEXT_MAX_CHARS, ge=1)

    @field_validator("save_dir", mode="before")
    @classmethod
    def _blank_save_dir_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def file_limits(self) -> FileExtractionLimits:
        """Build extraction limits for attachments (no URL fetching)."""
        return FileExtractionLimits(
            allow_url=False,
            allowed_mimes=self.allowed_mimes,
            max_bytes=min(self.file_max_bytes, self.max_bytes),
            max_chars=self.file_max_chars,
            max_redirects=0,
            timeout_ms=0,
            pdf=PdfLimits(
                max_pages=self.pdf_max_pages,
                max_pixels=self.pdf_max_pixels,
                min_text_chars=self.pdf_min_text_chars,
            ),
        )


def load_environment() -> None:
    """Load environment variables from .env file if it exists."""
    load_dotenv()


def _int_from_env(key: str) -> int | None:
    value = os.getenv(key)
    if value is None or not value.strip():
        return None
    try:
        return int(value.strip())
    except ValueError as e:
        raise ConfigurationException(
            f"{key} must be an integer, got '{value}'",
            config_key=key,
            config_value=value,
        ) from e


def load_attachment_settings(**overrides: Any) -> AttachmentSettings:
    """Build settings from the environment, with explicit overrides on top.

    Reads ``CHAT_ATTACHMENT_*`` variables after loading ``.env``. Keyword
    arguments take precedence over environment values.

    Args:
        **overrides: Any ``AttachmentSettings`` field

    Returns:
        Validated AttachmentSettings

    Raises:
        ConfigurationException: If an integer variable cannot be parsed
    """
    load_environment()

    values: dict[str, Any] = {}
    for field_name, env_key in _INT_ENV_VARS.items():
        parsed = _int_from_env(env_key)
        if parsed is not None:
            values[field_name] = parsed

    save_dir = os.getenv("CHAT_ATTACHMENT_SAVE_DIR")
    if save_dir:
        values["save_dir"] = Path(save_dir).expanduser()

    mimes = os.getenv("CHAT_ATTACHMENT_ALLOWED_MIMES")
    if mimes:
        values["allowed_mimes"] = normalize_mime_list(
            mimes.split(","), DEFAULT_INPUT_FILE_MIMES
        )

    values.update(overrides)
    return AttachmentSettings(**values)
