"""Base64 decoding and size validation for attachment payloads."""

import base64
import binascii
import re
from typing import Any

from chat_attachments.exceptions import InvalidEncodingException, SizeExceededException

_DATA_URL_RE = re.compile(r"^data:[^;]+;base64,(.*)$", re.DOTALL)
_NON_BASE64_RE = re.compile(r"[^A-Za-z0-9+/=]")


def strip_data_url(content: str) -> str:
    """Trim ``content`` and drop a leading ``data:<mime>;base64,`` envelope."""
    payload = content.strip()
    match = _DATA_URL_RE.match(payload)
    if match:
        payload = match.group(1)
    return payload


def validate_base64(payload: str, label: str) -> None:
    """Check base64 structure without decoding.

    Args:
        payload: Candidate base64 text
        label: Attachment label used in the error message

    Raises:
        InvalidEncodingException: If the length is not a multiple of 4 or the
            payload contains characters outside the base64 alphabet
    """
    if len(payload) % 4 != 0 or _NON_BASE64_RE.search(payload):
        raise InvalidEncodingException(
            f"attachment {label}: invalid base64 content", label=label
        )


def check_size(size_bytes: int, max_bytes: int, label: str) -> None:
    """Reject empty payloads and payloads above ``max_bytes``."""
    if size_bytes <= 0 or size_bytes > max_bytes:
        raise SizeExceededException(
            f"attachment {label}: exceeds size limit "
            f"({size_bytes} > {max_bytes} bytes)",
            label=label,
            size_bytes=size_bytes,
            max_bytes=max_bytes,
        )


def decode_base64(payload: str, label: str) -> bytes:
    """Decode an already validated payload."""
    try:
        return base64.b64decode(payload)
    except (binascii.Error, ValueError) as e:
        # Padding in the middle of the payload passes the charset check
        raise InvalidEncodingException(
            f"attachment {label}: invalid base64 content", label=label
        ) from e


def decode_attachment_content(
    content: Any, label: str, max_bytes: int
) -> tuple[str, bytes]:
    """Validate and decode an attachment's ``content`` field.

    Args:
        content: Raw content value from the client
        label: Attachment label used in error messages
        max_bytes: Maximum decoded size in bytes

    Returns:
        Tuple of (stripped base64 payload, decoded bytes)

    Raises:
        InvalidEncodingException: If content is not a string or not valid base64
        SizeExceededException: If the decoded size is zero or above ``max_bytes``
    """
    if not isinstance(content, str):
        raise InvalidEncodingException(
            f"attachment {label}: content must be base64 string", label=label
        )

    payload = strip_data_url(content)
    validate_base64(payload, label)
    data = decode_base64(payload, label)
    check_size(len(data), max_bytes, label)
    return payload, data
