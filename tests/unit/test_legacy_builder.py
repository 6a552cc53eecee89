"""Unit tests for the deprecated markdown data-URL builder."""

import base64

import pytest

from chat_attachments.exceptions import (
    InvalidEncodingException,
    SizeExceededException,
    UnsupportedAttachmentException,
)
from chat_attachments.files.processors import build_message_with_attachments


class TestBuildMessageWithAttachments:
    """Tests for ``build_message_with_attachments``."""

    @pytest.mark.unit
    def test_emits_deprecation_warning(self) -> None:
        """Test that every call warns."""
        with pytest.warns(DeprecationWarning, match="parse_message_with_attachments"):
            assert build_message_with_attachments("hi", None) == "hi"

    @pytest.mark.unit
    def test_builds_markdown_image(self, png_b64: str) -> None:
        """Test the markdown data URL output."""
        with pytest.warns(DeprecationWarning):
            result = build_message_with_attachments(
                "see",
                [{"fileName": "my photo.png", "mimeType": "image/png", "content": png_b64}],
            )
        assert result == f"see\n\n![my_photo.png](data:image/png;base64,{png_b64})"

    @pytest.mark.unit
    def test_blank_message_has_no_separator(self, png_b64: str) -> None:
        """Test that blocks stand alone when the message is blank."""
        with pytest.warns(DeprecationWarning):
            result = build_message_with_attachments(
                " ",
                [
                    {"mimeType": "image/png", "content": png_b64},
                    None,
                    {"mimeType": "image/png", "content": png_b64},
                ],
            )
        assert result == (
            f" ![attachment-1](data:image/png;base64,{png_b64})"
            f"\n\n![attachment-3](data:image/png;base64,{png_b64})"
        )

    @pytest.mark.unit
    def test_rejects_non_images(self, png_b64: str) -> None:
        """Test that only claimed image types are accepted."""
        with pytest.warns(DeprecationWarning):
            with pytest.raises(
                UnsupportedAttachmentException, match="only image/\\* supported"
            ):
                build_message_with_attachments(
                    "", [{"fileName": "a.pdf", "mimeType": "application/pdf", "content": png_b64}]
                )

    @pytest.mark.unit
    def test_data_urls_are_not_stripped(self, png_b64: str) -> None:
        """Test that the legacy path rejects data-URL envelopes."""
        with pytest.warns(DeprecationWarning):
            with pytest.raises(InvalidEncodingException):
                build_message_with_attachments(
                    "",
                    [
                        {
                            "mimeType": "image/png",
                            "content": f"data:image/png;base64,{png_b64}",
                        }
                    ],
                )

    @pytest.mark.unit
    def test_non_string_content(self) -> None:
        """Test that non-string content is rejected."""
        with pytest.warns(DeprecationWarning):
            with pytest.raises(InvalidEncodingException, match="content must be base64"):
                build_message_with_attachments("", [{"mimeType": "image/png"}])

    @pytest.mark.unit
    def test_default_two_megabyte_ceiling(self) -> None:
        """Test the fixed legacy ceiling."""
        content = base64.b64encode(b"\x00" * 2_000_001).decode()
        with pytest.warns(DeprecationWarning):
            with pytest.raises(SizeExceededException, match="2000001 > 2000000"):
                build_message_with_attachments(
                    "", [{"mimeType": "image/png", "content": content}]
                )
