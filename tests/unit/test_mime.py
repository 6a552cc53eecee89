"""Unit tests for MIME helpers."""

import sys
from typing import Any
from unittest.mock import Mock, patch

import pytest

from chat_attachments.files.mime import (
    detect_mime,
    extension_for_mime,
    is_image_mime,
    normalize_mime,
    normalize_mime_list,
)


class TestNormalizeMime:
    """Tests for MIME normalization."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("image/png", "image/png"),
            ("Image/PNG", "image/png"),
            (" text/plain ; charset=utf-8", "text/plain"),
            ("", None),
            ("  ", None),
            (";charset=utf-8", None),
            (None, None),
        ],
    )
    def test_normalize(self, raw: str | None, expected: str | None) -> None:
        """Test parameter stripping, trimming and lowercasing."""
        assert normalize_mime(raw) == expected

    @pytest.mark.unit
    def test_normalize_mime_list_uses_fallback_when_empty(self) -> None:
        """Test that an all-blank list falls back to defaults."""
        result = normalize_mime_list(["", " ; x=1"], ["Text/Plain"])
        assert result == frozenset({"text/plain"})

    @pytest.mark.unit
    def test_normalize_mime_list_normalizes_values(self) -> None:
        """Test that provided values are normalized and deduplicated."""
        result = normalize_mime_list(
            ["application/PDF", "application/pdf; x=1", "text/csv"], ["text/plain"]
        )
        assert result == frozenset({"application/pdf", "text/csv"})


class TestIsImageMime:
    """Tests for image type detection."""

    @pytest.mark.unit
    def test_image_types(self) -> None:
        """Test the ``image/`` prefix rule."""
        assert is_image_mime("image/png")
        assert is_image_mime("image/svg+xml")
        assert not is_image_mime("application/pdf")
        assert not is_image_mime("")
        assert not is_image_mime(None)


class TestExtensionForMime:
    """Tests for extension lookup."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("mime", "ext"),
        [
            ("image/jpeg", ".jpg"),
            ("text/plain", ".txt"),
            ("text/markdown", ".md"),
            ("application/pdf", ".pdf"),
            ("Application/JSON; charset=utf-8", ".json"),
        ],
    )
    def test_preferred_extensions(self, mime: str, ext: str) -> None:
        """Test the preferred extension table."""
        assert extension_for_mime(mime) == ext

    @pytest.mark.unit
    def test_falls_back_to_mimetypes(self) -> None:
        """Test that unknown table entries use the mimetypes registry."""
        with patch(
            "chat_attachments.files.mime.mimetypes.guess_extension",
            return_value=".xyz",
        ) as mock_guess:
            assert extension_for_mime("application/x-custom") == ".xyz"
        mock_guess.assert_called_once_with("application/x-custom")

    @pytest.mark.unit
    def test_unknown_or_empty(self) -> None:
        """Test that unknown and empty types have no extension."""
        assert extension_for_mime("application/x-definitely-not-registered") is None
        assert extension_for_mime("") is None
        assert extension_for_mime(None) is None


class TestDetectMime:
    """Tests for the libmagic-backed sniffer with python-magic mocked out."""

    def _fake_magic(self, answer: str) -> Any:
        fake = Mock()
        fake.from_buffer.return_value = answer
        return fake

    @pytest.mark.unit
    def test_returns_normalized_answer(self) -> None:
        """Test that libmagic answers are normalized."""
        fake = self._fake_magic("image/PNG")
        with patch.dict(sys.modules, {"magic": fake}):
            assert detect_mime(b"\x89PNG") == "image/png"
        fake.from_buffer.assert_called_once_with(b"\x89PNG", mime=True)

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "answer", ["application/octet-stream", "inode/x-empty", "application/x-empty"]
    )
    def test_generic_answers_are_inconclusive(self, answer: str) -> None:
        """Test that uninformative answers become None."""
        with patch.dict(sys.modules, {"magic": self._fake_magic(answer)}):
            assert detect_mime(b"\x00\x01") is None
