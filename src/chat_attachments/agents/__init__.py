"""LLM agents that accept chat attachments."""

from .attachment_agent import (
    AttachmentAgent,
    build_user_content,
    create_attachment_agent,
)

__all__ = ["AttachmentAgent", "build_user_content", "create_attachment_agent"]
