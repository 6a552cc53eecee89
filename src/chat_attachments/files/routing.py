"""Reconcile claimed and sniffed MIME types and route attachments.

Self-reported MIME types are not trusted: clients label screenshots as
``application/octet-stream`` and send PDFs as ``image/png``. The routing table
below treats a conclusive sniff as authoritative, falls back to the claimed
type when sniffing is inconclusive, and sends anything ambiguous down the
file-reference path so non-image bytes never reach a model as an image.

Sniffing produces a tagged outcome (``Sniffed`` or ``Inconclusive``) and
``decide_route`` is a pure function of that outcome.
"""

import base64
import logging
from dataclasses import dataclass
from typing import Literal

from chat_attachments.files.mime import MimeSniffer, is_image_mime, normalize_mime

logger = logging.getLogger(__name__)

SNIFF_WINDOW_CHARS = 256
MIN_SNIFF_CHARS = 8

Route = Literal["image", "file"]


@dataclass(frozen=True)
class Sniffed:
    """The sniffer recognised the payload."""

    mime: str


@dataclass(frozen=True)
class Inconclusive:
    """Too few bytes, an unknown signature, or a sniffer failure."""


SniffOutcome = Sniffed | Inconclusive


@dataclass(frozen=True)
class RouteDecision:
    """Outcome of reconciling one attachment's MIME types.

    Attributes:
        route: ``"image"`` for inline image blocks, ``"file"`` for references
        effective_mime: Sniffed type, else claimed type, else the raw claim
        claimed_mime: Normalized claimed type, if any
        sniffed_mime: Normalized sniffed type, if sniffing was conclusive
        warnings: Messages to log, in order
    """

    route: Route
    effective_mime: str
    claimed_mime: str | None
    sniffed_mime: str | None
    warnings: tuple[str, ...] = ()

    @property
    def is_image(self) -> bool:
        return self.route == "image"


def sniff_mime_from_base64(payload: str, sniffer: MimeSniffer) -> SniffOutcome:
    """Sniff the type of a base64 payload from a bounded prefix.

    At most ``SNIFF_WINDOW_CHARS`` characters are decoded, rounded down to a
    multiple of 4. Fewer than ``MIN_SNIFF_CHARS`` usable characters is
    inconclusive. Sniffer errors are swallowed.
    """
    trimmed = payload.strip()
    if not trimmed:
        return Inconclusive()

    take = min(SNIFF_WINDOW_CHARS, len(trimmed))
    slice_len = take - (take % 4)
    if slice_len < MIN_SNIFF_CHARS:
        return Inconclusive()

    try:
        head = base64.b64decode(trimmed[:slice_len])
        detected = sniffer(head)
    except Exception as e:  # noqa: BLE001 - sniffers raise anything
        logger.debug("MIME sniffing failed: %s", e)
        return Inconclusive()

    mime = normalize_mime(detected)
    return Sniffed(mime) if mime else Inconclusive()


def decide_route(
    label: str, raw_mime: str | None, outcome: SniffOutcome
) -> RouteDecision:
    """Apply the routing table to one attachment.

    Args:
        label: Attachment label used in warning messages
        raw_mime: MIME type as claimed by the client (not normalized)
        outcome: Result of sniffing the payload

    Returns:
        RouteDecision with the route, effective MIME and warnings to log
    """
    claimed = normalize_mime(raw_mime)
    sniffed = outcome.mime if isinstance(outcome, Sniffed) else None
    effective = sniffed or claimed or (raw_mime or "")

    warnings: list[str] = []
    route: Route
    if sniffed is not None and not is_image_mime(sniffed):
        route = "file"
        warnings.append(
            f"attachment {label}: non-image ({sniffed}), adding as file reference"
        )
    elif sniffed is None and not is_image_mime(claimed):
        route = "file"
        warnings.append(
            f"attachment {label}: not detected as image, adding as file reference"
        )
    else:
        route = "image"

    if sniffed is not None and claimed is not None and sniffed != claimed:
        warnings.append(
            f"attachment {label}: mime mismatch ({claimed} -> {sniffed}), using sniffed"
        )

    return RouteDecision(
        route=route,
        effective_mime=effective,
        claimed_mime=claimed,
        sniffed_mime=sniffed,
        warnings=tuple(warnings),
    )
