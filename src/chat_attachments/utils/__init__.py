"""Configuration utilities for attachment limits and environment loading."""

from .config import AttachmentSettings, load_attachment_settings, load_environment

__all__ = [
    "AttachmentSettings",
    "load_attachment_settings",
    "load_environment",
]
