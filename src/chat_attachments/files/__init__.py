"""Attachment decoding, type reconciliation, file references and extraction."""

from .decoding import decode_attachment_content, strip_data_url, validate_base64
from .extraction import (
    ExtractedFileContent,
    FileExtractionLimits,
    FileSource,
    PdfLimits,
    extract_file_content_from_source,
)
from .mime import detect_mime, extension_for_mime, is_image_mime, normalize_mime
from .processors import (
    aparse_message_with_attachments,
    build_message_with_attachments,
    compose_message,
    parse_message_with_attachments,
)
from .references import FileReference, build_file_reference, safe_attachment_basename
from .routing import Inconclusive, RouteDecision, Sniffed, decide_route

__all__ = [
    "aparse_message_with_attachments",
    "build_file_reference",
    "build_message_with_attachments",
    "compose_message",
    "decide_route",
    "decode_attachment_content",
    "detect_mime",
    "extension_for_mime",
    "extract_file_content_from_source",
    "ExtractedFileContent",
    "FileExtractionLimits",
    "FileReference",
    "FileSource",
    "Inconclusive",
    "is_image_mime",
    "normalize_mime",
    "parse_message_with_attachments",
    "PdfLimits",
    "RouteDecision",
    "safe_attachment_basename",
    "Sniffed",
    "strip_data_url",
    "validate_base64",
]
