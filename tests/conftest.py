"""Shared pytest configuration and fixtures for the test suite."""

import base64
from typing import Any

import pytest

PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"
    b"\x08\x06\x00\x00\x00\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\xff"
    b"\xff?\x00\x05\xfe\x02\xfe\xa7\x35\x81\x84\x00\x00\x00\x00IEND\xaeB`\x82"
)
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n<<>>\n%%EOF\n"


def b64(data: bytes) -> str:
    """Base64-encode bytes to text."""
    return base64.b64encode(data).decode("ascii")


def signature_sniffer(data: bytes) -> str | None:
    """Deterministic stand-in for libmagic used throughout the unit tests."""
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if data.startswith(b"%PDF-"):
        return "application/pdf"
    return None


class RecordingLog:
    """Warning sink that remembers every message."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def warning(self, msg: str) -> None:
        self.messages.append(msg)

    def __repr__(self) -> str:
        return f"RecordingLog(messages={len(self.messages)})"


@pytest.fixture
def png_b64() -> str:
    """Base64 of a 1x1 PNG."""
    return b64(PNG_BYTES)


@pytest.fixture
def jpeg_b64() -> str:
    """Base64 of a JPEG header."""
    return b64(JPEG_BYTES)


@pytest.fixture
def pdf_b64() -> str:
    """Base64 of a minimal PDF-looking payload."""
    return b64(PDF_BYTES)


@pytest.fixture
def text_b64() -> str:
    """Base64 of a short plain-text document with no magic signature."""
    return b64(b"meeting notes: ship the attachment parser on friday\n")


@pytest.fixture
def sniffer() -> Any:
    """Signature sniffer recognising PNG, JPEG and PDF."""
    return signature_sniffer


@pytest.fixture
def recording_log() -> RecordingLog:
    """Fresh warning recorder."""
    return RecordingLog()


# Pytest configuration
pytest_plugins: list[str] = []
