"""MIME normalization, byte sniffing and extension lookup."""

import mimetypes
from collections.abc import Callable, Iterable

MimeSniffer = Callable[[bytes], str | None]
ExtensionLookup = Callable[[str], str | None]

# libmagic answers that carry no information about the payload
_GENERIC_SNIFF_RESULTS = frozenset(
    {"application/octet-stream", "inode/x-empty", "application/x-empty"}
)

# mimetypes returns platform-dependent or surprising picks for some of these
_PREFERRED_EXTENSIONS: dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/heic": ".heic",
    "image/heif": ".heif",
    "application/pdf": ".pdf",
    "application/json": ".json",
    "application/zip": ".zip",
    "text/plain": ".txt",
    "text/markdown": ".md",
    "text/csv": ".csv",
    "text/html": ".html",
}


def normalize_mime(mime: str | None) -> str | None:
    """Strip parameters, whitespace and case from a MIME string.

    ``"Text/Plain; charset=utf-8"`` becomes ``"text/plain"``. Empty results are
    returned as ``None``.
    """
    if not mime:
        return None
    cleaned = mime.split(";", 1)[0].strip().lower()
    return cleaned or None


def normalize_mime_list(
    values: Iterable[str] | None, fallback: Iterable[str]
) -> frozenset[str]:
    """Normalize a list of MIME strings, falling back when nothing survives."""
    normalized = {m for m in (normalize_mime(v) for v in values or ()) if m}
    if not normalized:
        normalized = {m for m in (normalize_mime(v) for v in fallback) if m}
    return frozenset(normalized)


def is_image_mime(mime: str | None) -> bool:
    """Return True for ``image/*`` types."""
    return isinstance(mime, str) and mime.startswith("image/")


def detect_mime(data: bytes) -> str | None:
    """Sniff a MIME type from leading bytes using libmagic.

    Generic answers such as ``application/octet-stream`` are reported as
    ``None``. Import errors (python-magic or libmagic missing) propagate; the
    routing layer treats any sniffer failure as inconclusive.
    """
    import magic

    detected = magic.from_buffer(data, mime=True)
    mime = normalize_mime(detected)
    if mime is None or mime in _GENERIC_SNIFF_RESULTS:
        return None
    return mime


def extension_for_mime(mime: str | None) -> str | None:
    """Return the conventional file extension (with leading dot) for ``mime``."""
    normalized = normalize_mime(mime)
    if normalized is None:
        return None
    preferred = _PREFERRED_EXTENSIONS.get(normalized)
    if preferred:
        return preferred
    return mimetypes.guess_extension(normalized)
