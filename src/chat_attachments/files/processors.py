"""Attachment parsing for chat messages.

``parse_message_with_attachments`` is the entry point used by the chat
transport. It decodes and validates every attachment, sniffs its real type,
turns images into ``ImageContent`` blocks and folds everything else into the
message text as file reference blocks.

Example:
    ```python
    from chat_attachments import parse_message_with_attachments

    parsed = parse_message_with_attachments(
        "What is in these?",
        [
            {"fileName": "cat.png", "mimeType": "image/png", "content": png_b64},
            {"fileName": "notes.txt", "mimeType": "text/plain", "content": txt_b64},
        ],
        save_dir="/var/lib/chat/uploads",
    )
    parsed.images    # [ImageContent(type="image", data=png_b64, mime_type="image/png")]
    parsed.message   # "What is in these?\\n\\n[Attached: notes.txt (text/plain)]\\n..."
    ```
"""

import asyncio
import concurrent.futures
import functools
import logging
import os
import re
import warnings
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from chat_attachments.exceptions import (
    InvalidEncodingException,
    UnsupportedAttachmentException,
)
from chat_attachments.files.decoding import (
    check_size,
    decode_attachment_content,
    decode_base64,
    validate_base64,
)
from chat_attachments.files.extraction import (
    FileExtractor,
    extract_file_content_from_source,
)
from chat_attachments.files.mime import (
    ExtensionLookup,
    MimeSniffer,
    detect_mime,
    extension_for_mime,
)
from chat_attachments.files.references import (
    AttachmentLog,
    build_file_reference,
)
from chat_attachments.files.routing import (
    RouteDecision,
    decide_route,
    sniff_mime_from_base64,
)
from chat_attachments.models import ChatAttachment, ImageContent, ParsedMessage
from chat_attachments.utils.config import AttachmentSettings

logger = logging.getLogger(__name__)

LEGACY_MAX_BYTES = 2_000_000

AttachmentInput = ChatAttachment | Mapping[str, Any] | None


@dataclass(frozen=True)
class DecodedAttachment:
    """An attachment that passed structural and size validation."""

    index: int
    label: str
    raw_mime: str
    payload: str
    data: bytes


@dataclass(frozen=True)
class ResolvedAttachment:
    """A decoded attachment with its reconciled MIME types and route."""

    label: str
    payload: str
    data: bytes
    claimed_mime: str | None
    sniffed_mime: str | None
    effective_mime: str
    raw_mime: str
    decision: RouteDecision

    @property
    def size_bytes(self) -> int:
        return len(self.data)


def _coerce(attachment: AttachmentInput) -> ChatAttachment | None:
    if attachment is None:
        return None
    if isinstance(attachment, ChatAttachment):
        return attachment
    return ChatAttachment.model_validate(dict(attachment))


def attachment_label(attachment: ChatAttachment, index: int) -> str:
    """Label for messages: file name, else declared type, else ``attachment-N``."""
    return attachment.file_name or attachment.type or f"attachment-{index + 1}"


def decode_attachments(
    attachments: Sequence[AttachmentInput], max_bytes: int
) -> list[DecodedAttachment]:
    """Validate and decode every attachment before anything is written.

    Raises:
        InvalidEncodingException: On the first malformed attachment
        SizeExceededException: On the first empty or oversized attachment
    """
    decoded: list[DecodedAttachment] = []
    for index, raw in enumerate(attachments):
        attachment = _coerce(raw)
        if attachment is None:
            continue
        label = attachment_label(attachment, index)
        payload, data = decode_attachment_content(attachment.content, label, max_bytes)
        decoded.append(
            DecodedAttachment(
                index=index,
                label=label,
                raw_mime=attachment.mime_type or "",
                payload=payload,
                data=data,
            )
        )
    return decoded


def resolve_attachment(
    decoded: DecodedAttachment, sniffer: MimeSniffer = detect_mime
) -> ResolvedAttachment:
    """Sniff a decoded attachment and decide where it goes."""
    outcome = sniff_mime_from_base64(decoded.payload, sniffer)
    decision = decide_route(decoded.label, decoded.raw_mime, outcome)
    return ResolvedAttachment(
        label=decoded.label,
        payload=decoded.payload,
        data=decoded.data,
        claimed_mime=decision.claimed_mime,
        sniffed_mime=decision.sniffed_mime,
        effective_mime=decision.effective_mime,
        raw_mime=decoded.raw_mime,
        decision=decision,
    )


def compose_message(message: str, file_refs: Sequence[str]) -> str:
    """Append reference blocks to ``message``, separated by blank lines.

    The message text is kept as given; the separator is dropped when it is
    blank.
    """
    if not file_refs:
        return message
    refs = "\n\n".join(file_refs)
    if not message.strip():
        return refs
    return f"{message}\n\n{refs}"


def parse_message_with_attachments(
    message: str,
    attachments: Sequence[AttachmentInput] | None,
    *,
    max_bytes: int | None = None,
    save_dir: str | os.PathLike[str] | None = None,
    log: AttachmentLog | None = None,
    settings: AttachmentSettings | None = None,
    sniffer: MimeSniffer = detect_mime,
    extension_lookup: ExtensionLookup = extension_for_mime,
    extractor: FileExtractor = extract_file_content_from_source,
    max_workers: int = 1,
) -> ParsedMessage:
    """Parse attachments into image blocks and file references.

    Non-image attachments are written to ``save_dir`` when one is given (the
    path is added to the message) and, for extractable types, their text is
    inlined under a ``--- Content ---`` line.

    Args:
        message: The user's message text
        attachments: Attachments as ``ChatAttachment`` models or wire dicts;
            ``None`` entries are skipped
        max_bytes: Per-attachment decoded size ceiling (overrides settings)
        save_dir: Directory for non-image attachments (overrides settings)
        log: Warning sink; defaults to this module's logger
        settings: Limits and defaults; ``AttachmentSettings()`` when omitted
        sniffer: Byte sniffer returning a MIME type or None
        extension_lookup: Maps MIME types to file extensions
        extractor: Bounded text extraction capability
        max_workers: Attachments processed concurrently after validation

    Returns:
        ParsedMessage with the composed message and image blocks

    Raises:
        InvalidEncodingException: If any attachment is not valid base64 text
        SizeExceededException: If any attachment is empty or too large
    """
    if not attachments:
        return ParsedMessage(message=message, images=[])

    settings = settings or AttachmentSettings()
    if max_bytes is not None:
        settings = settings.model_copy(update={"max_bytes": max_bytes})
    if not save_dir:
        save_dir = settings.save_dir
    log = log or logger
    limits = settings.file_limits()

    decoded = decode_attachments(attachments, settings.max_bytes)

    def process(item: DecodedAttachment) -> ImageContent | str:
        resolved = resolve_attachment(item, sniffer)
        for warning in resolved.decision.warnings:
            log.warning(warning)

        if resolved.decision.is_image:
            return ImageContent(
                data=resolved.payload,
                mime_type=resolved.effective_mime or resolved.raw_mime,
            )

        reference = build_file_reference(
            resolved.label,
            resolved.payload,
            resolved.data,
            resolved.effective_mime,
            save_dir=save_dir,
            limits=limits,
            extractor=extractor,
            extension_lookup=extension_lookup,
            max_text_chars=settings.extracted_text_max_chars,
            log=log,
        )
        return reference.render()

    if max_workers > 1 and len(decoded) > 1:
        logger.debug(
            "Processing %d attachments with %d workers", len(decoded), max_workers
        )
        with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as pool:
            outputs = list(pool.map(process, decoded))
    else:
        outputs = [process(item) for item in decoded]

    images = [out for out in outputs if isinstance(out, ImageContent)]
    file_refs = [out for out in outputs if isinstance(out, str)]

    return ParsedMessage(message=compose_message(message, file_refs), images=images)


async def aparse_message_with_attachments(
    message: str,
    attachments: Sequence[AttachmentInput] | None,
    **kwargs: Any,
) -> ParsedMessage:
    """Async wrapper around ``parse_message_with_attachments``.

    Runs the pipeline in a worker thread so callers can bound it with
    ``asyncio.wait_for``.
    """
    return await asyncio.to_thread(
        functools.partial(
            parse_message_with_attachments, message, attachments, **kwargs
        )
    )


def build_message_with_attachments(
    message: str,
    attachments: Sequence[AttachmentInput] | None,
    max_bytes: int = LEGACY_MAX_BYTES,
) -> str:
    """Inline image attachments as markdown data URLs.

    Deprecated: models do not treat markdown data URLs as images. Use
    ``parse_message_with_attachments`` instead.

    Raises:
        InvalidEncodingException: If content is not valid base64 text
        UnsupportedAttachmentException: If a claimed MIME type is not ``image/*``
        SizeExceededException: If an attachment is empty or too large
    """
    warnings.warn(
        "build_message_with_attachments is deprecated; use "
        "parse_message_with_attachments.",
        DeprecationWarning,
        stacklevel=2,
    )
    if not attachments:
        return message

    blocks: list[str] = []
    for index, raw in enumerate(attachments):
        attachment = _coerce(raw)
        if attachment is None:
            continue
        mime = attachment.mime_type or ""
        content = attachment.content
        label = attachment_label(attachment, index)

        if not isinstance(content, str):
            raise InvalidEncodingException(
                f"attachment {label}: content must be base64 string", label=label
            )
        if not mime.startswith("image/"):
            raise UnsupportedAttachmentException(
                f"attachment {label}: only image/* supported",
                label=label,
                mime_type=mime,
            )

        payload = content.strip()
        validate_base64(payload, label)
        check_size(len(decode_base64(payload, label)), max_bytes, label)

        safe_label = re.sub(r"\s+", "_", label)
        blocks.append(f"![{safe_label}](data:{mime};base64,{content})")

    if not blocks:
        return message
    separator = "\n\n" if message.strip() else ""
    return message + separator + "\n\n".join(blocks)
