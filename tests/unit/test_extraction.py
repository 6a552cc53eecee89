"""Unit tests for bounded text extraction."""

import base64
import sys
from unittest.mock import MagicMock, patch

import pytest

from chat_attachments.exceptions import ExtractionException
from chat_attachments.files.extraction import (
    FileExtractionLimits,
    FileSource,
    PdfLimits,
    extract_file_content_from_source,
)


def _source(data: bytes, media_type: str, filename: str = "doc") -> FileSource:
    return FileSource(
        data=base64.b64encode(data).decode(), media_type=media_type, filename=filename
    )


class TestTextExtraction:
    """Tests for plain-text style documents."""

    @pytest.mark.unit
    def test_extracts_utf8_text(self) -> None:
        """Test decoding a UTF-8 document."""
        result = extract_file_content_from_source(
            _source("héllo wörld, this is a note".encode(), "text/plain", "n.txt"),
            FileExtractionLimits(),
        )
        assert result.filename == "n.txt"
        assert result.text == "héllo wörld, this is a note"

    @pytest.mark.unit
    def test_media_type_parameters_are_ignored(self) -> None:
        """Test that ``; charset=`` parameters do not block extraction."""
        result = extract_file_content_from_source(
            _source(b'{"a": 1}', "application/json; charset=utf-8"),
            FileExtractionLimits(),
        )
        assert result.text == '{"a": 1}'

    @pytest.mark.unit
    def test_clamps_to_max_chars(self) -> None:
        """Test the extractor character ceiling."""
        result = extract_file_content_from_source(
            _source(b"abcdefghij" * 10, "text/plain"),
            FileExtractionLimits(max_chars=15),
        )
        assert result.text == "abcdefghijabcde"

    @pytest.mark.unit
    def test_rejects_disallowed_mime(self) -> None:
        """Test that types outside the allowed set raise."""
        with pytest.raises(ExtractionException, match="Unsupported file type") as exc:
            extract_file_content_from_source(
                _source(b"PK\x03\x04", "application/zip"), FileExtractionLimits()
            )
        assert exc.value.mime_type == "application/zip"

    @pytest.mark.unit
    def test_rejects_oversized_payload(self) -> None:
        """Test the extraction byte ceiling."""
        with pytest.raises(ExtractionException, match="too large"):
            extract_file_content_from_source(
                _source(b"x" * 20, "text/plain"), FileExtractionLimits(max_bytes=10)
            )

    @pytest.mark.unit
    def test_rejects_invalid_base64(self) -> None:
        """Test that undecodable sources raise ExtractionException."""
        with pytest.raises(ExtractionException, match="Invalid base64"):
            extract_file_content_from_source(
                FileSource(data="not base64!", media_type="text/plain"),
                FileExtractionLimits(),
            )


class TestPdfExtraction:
    """Tests for PDF extraction with pypdf mocked out."""

    def _fake_pypdf(self, page_texts: list[str]) -> MagicMock:
        pages = []
        for text in page_texts:
            page = MagicMock()
            page.extract_text.return_value = text
            pages.append(page)
        fake = MagicMock()
        fake.PdfReader.return_value.pages = pages
        return fake

    @pytest.mark.unit
    def test_reads_at_most_max_pages(self) -> None:
        """Test the page ceiling."""
        fake = self._fake_pypdf(["one", "two", "three", "four"])
        limits = FileExtractionLimits(pdf=PdfLimits(max_pages=2))

        with patch.dict(sys.modules, {"pypdf": fake}):
            result = extract_file_content_from_source(
                _source(b"%PDF-1.4 ...", "application/pdf"), limits
            )

        assert result.text == "one\n\ntwo"
        fake.PdfReader.return_value.pages[2].extract_text.assert_not_called()

    @pytest.mark.unit
    def test_blank_pages_are_skipped(self) -> None:
        """Test that pages with no text layer do not add separators."""
        fake = self._fake_pypdf(["", "  ", "text"])
        with patch.dict(sys.modules, {"pypdf": fake}):
            result = extract_file_content_from_source(
                _source(b"%PDF-1.4 ...", "application/pdf"), FileExtractionLimits()
            )
        assert result.text == "text"

    @pytest.mark.unit
    def test_missing_pypdf_raises_extraction_exception(self) -> None:
        """Test that the optional dependency being absent is reported."""
        with patch.dict(sys.modules, {"pypdf": None}):
            with pytest.raises(ExtractionException, match="pypdf") as exc:
                extract_file_content_from_source(
                    _source(b"%PDF-1.4 ...", "application/pdf"),
                    FileExtractionLimits(),
                )
        assert isinstance(exc.value.original_error, ImportError)

    @pytest.mark.unit
    def test_reader_errors_are_wrapped(self) -> None:
        """Test that backend failures surface as ExtractionException."""
        fake = MagicMock()
        fake.PdfReader.side_effect = ValueError("EOF marker not found")
        with patch.dict(sys.modules, {"pypdf": fake}):
            with pytest.raises(ExtractionException, match="Failed to read PDF"):
                extract_file_content_from_source(
                    _source(b"%PDF-broken", "application/pdf"),
                    FileExtractionLimits(),
                )
