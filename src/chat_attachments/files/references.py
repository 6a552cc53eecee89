"""File reference blocks for non-image attachments.

A reference block stands in for an attachment inside the chat message::

    [Attached: report.pdf (application/pdf)]
    Path: /srv/uploads/report.pdf
    --- Content ---
    <extracted text>

The ``Path:`` line appears only when the bytes were written to a save
directory, and the content section only when text extraction succeeded.
"""

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from chat_attachments.exceptions import PersistenceException
from chat_attachments.files.extraction import (
    FileExtractionLimits,
    FileExtractor,
    FileSource,
    extract_file_content_from_source,
)
from chat_attachments.files.mime import ExtensionLookup, extension_for_mime

logger = logging.getLogger(__name__)

DEFAULT_MIME = "application/octet-stream"
FALLBACK_BASENAME = "attachment"
MAX_BASENAME_CHARS = 80
EXTRACTED_TEXT_MAX_CHARS = 80_000
TRUNCATION_MARKER = "\n[... truncated]"
CONTENT_HEADER = "--- Content ---"

_PATH_SEP_RE = re.compile(r"[/\\]")
_UNSAFE_CHARS_RE = re.compile(r"[/\\\x00]")
_WINDOWS_RESERVED = frozenset(
    {"CON", "PRN", "AUX", "NUL"}
    | {f"COM{i}" for i in range(1, 10)}
    | {f"LPT{i}" for i in range(1, 10)}
)


class AttachmentLog(Protocol):
    """Anything with a ``warning`` method, such as a ``logging.Logger``."""

    def warning(self, msg: str) -> object: ...


@dataclass
class FileReference:
    """Reference block for one non-image attachment."""

    label: str
    effective_mime: str
    path: str | None = None
    content: str | None = None

    def lines(self) -> list[str]:
        lines = [f"[Attached: {self.label} ({self.effective_mime or DEFAULT_MIME})]"]
        if self.path:
            lines.append(f"Path: {self.path}")
        if self.content:
            lines.extend([CONTENT_HEADER, self.content])
        return lines

    def render(self) -> str:
        return "\n".join(self.lines())


def _label_extension(name: str) -> str:
    return os.path.splitext(name)[1]


def safe_attachment_basename(
    label: str,
    mime: str | None = None,
    extension_lookup: ExtensionLookup = extension_for_mime,
) -> str:
    """Derive a filename that stays inside whatever directory it is joined to.

    Directory components (``/`` or ``\\``) are discarded, NUL bytes replaced,
    the name capped at 80 characters, and dot-only or empty names replaced by
    ``attachment``. Windows device names are prefixed with ``_``. An extension
    matching ``mime`` (or the label's own extension) is appended if missing.

    Args:
        label: Untrusted attachment label
        mime: Effective MIME type used to pick an extension
        extension_lookup: Maps a MIME type to an extension

    Returns:
        A single path component with no separators
    """
    tail = _PATH_SEP_RE.split(str(label))[-1]
    base = _UNSAFE_CHARS_RE.sub("_", tail)[:MAX_BASENAME_CHARS]
    if not base.strip("."):
        base = FALLBACK_BASENAME
    if base.split(".", 1)[0].upper() in _WINDOWS_RESERVED:
        base = f"_{base}"

    ext = (extension_lookup(mime) if mime else None) or _label_extension(tail)
    ext = _UNSAFE_CHARS_RE.sub("_", ext) if ext else ""
    if ext and not ext.startswith("."):
        ext = f".{ext}"
    if ext and not base.lower().endswith(ext.lower()):
        base = f"{base}{ext}"
    return base


def persist_attachment(
    save_dir: str | os.PathLike[str], basename: str, data: bytes, label: str = ""
) -> Path:
    """Write attachment bytes to ``save_dir/basename`` with owner-only access.

    The directory is created with mode 0o700 and the file with 0o600. Symlinks
    at the target are not followed where the platform supports it.

    Returns:
        Absolute path of the written file

    Raises:
        PersistenceException: If the target escapes ``save_dir`` or any OS
            error occurs
    """
    directory = Path(save_dir)
    target = directory / basename
    try:
        directory.mkdir(mode=0o700, parents=True, exist_ok=True)
        resolved_dir = directory.resolve()
        resolved = target.resolve()
        if resolved.parent != resolved_dir:
            raise PersistenceException(
                f"attachment {label}: refusing to write outside {resolved_dir}",
                label=label,
                path=str(resolved),
            )
        flags = os.O_WRONLY | os.O_CREAT | os.O_TRUNC | getattr(os, "O_NOFOLLOW", 0)
        fd = os.open(resolved, flags, 0o600)
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
    except OSError as e:
        raise PersistenceException(
            str(e), label=label, path=str(target), original_error=e
        ) from e
    return resolved


def clamp_extracted_text(text: str, max_chars: int = EXTRACTED_TEXT_MAX_CHARS) -> str:
    """Truncate ``text`` to ``max_chars`` and mark the cut."""
    if len(text) > max_chars:
        return f"{text[:max_chars]}{TRUNCATION_MARKER}"
    return text


def build_file_reference(
    label: str,
    payload: str,
    data: bytes,
    effective_mime: str,
    *,
    save_dir: str | os.PathLike[str] | None = None,
    limits: FileExtractionLimits | None = None,
    extractor: FileExtractor = extract_file_content_from_source,
    extension_lookup: ExtensionLookup = extension_for_mime,
    max_text_chars: int = EXTRACTED_TEXT_MAX_CHARS,
    log: AttachmentLog | None = None,
) -> FileReference:
    """Build the reference block for a non-image attachment.

    Persistence failures are logged as warnings and drop the ``Path:`` line.
    Extraction failures are swallowed and drop the content section.

    Args:
        label: Attachment label shown in the header
        payload: Base64 payload (data URL stripped)
        data: Decoded bytes
        effective_mime: Reconciled MIME type, possibly empty
        save_dir: Directory to persist the bytes to, or None
        limits: Extraction limits; None uses ``FileExtractionLimits()``
        extractor: Text extraction capability
        extension_lookup: Maps MIME types to file extensions
        max_text_chars: Ceiling for inlined extracted text
        log: Warning sink; defaults to this module's logger

    Returns:
        FileReference for the attachment
    """
    log = log or logger
    limits = limits or FileExtractionLimits()
    reference = FileReference(label=label, effective_mime=effective_mime)

    if save_dir:
        basename = safe_attachment_basename(
            label, effective_mime or None, extension_lookup
        )
        try:
            reference.path = str(persist_attachment(save_dir, basename, data, label))
        except PersistenceException as e:
            log.warning(f"attachment {label}: failed to save to disk: {e}")

    if (
        effective_mime
        and effective_mime in limits.allowed_mimes
        and len(data) <= limits.max_bytes
    ):
        try:
            extracted = extractor(
                FileSource(
                    type="base64",
                    data=payload,
                    media_type=effective_mime,
                    filename=label,
                ),
                limits,
            )
        except Exception as e:  # noqa: BLE001 - extraction is best effort
            logger.debug("attachment %s: text extraction skipped: %s", label, e)
        else:
            text = (extracted.text or "").strip()
            if text:
                reference.content = clamp_extracted_text(text, max_text_chars)

    return reference
