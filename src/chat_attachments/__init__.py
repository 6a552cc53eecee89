"""Chat Attachments - validate, sniff and route chat attachments for LLM prompts."""

__version__ = "0.1.0"

# Attachment pipeline
from .files import (
    aparse_message_with_attachments,
    build_message_with_attachments,
    parse_message_with_attachments,
)

# Models
from .models import ChatAttachment, ImageContent, ParsedMessage

# Custom exceptions
from .exceptions import (
    AttachmentException,
    ConfigurationException,
    ExtractionException,
    InvalidEncodingException,
    PersistenceException,
    SizeExceededException,
    UnsupportedAttachmentException,
)

# Configuration utilities
from .utils import AttachmentSettings, load_attachment_settings, load_environment

# LiteLLM agent
from .agents import AttachmentAgent, build_user_content, create_attachment_agent

__all__ = [
    "__version__",
    "parse_message_with_attachments",
    "aparse_message_with_attachments",
    "build_message_with_attachments",
    "ChatAttachment",
    "ImageContent",
    "ParsedMessage",
    "AttachmentSettings",
    "load_attachment_settings",
    "load_environment",
    "AttachmentAgent",
    "build_user_content",
    "create_attachment_agent",
    # Exceptions
    "AttachmentException",
    "ConfigurationException",
    "ExtractionException",
    "InvalidEncodingException",
    "PersistenceException",
    "SizeExceededException",
    "UnsupportedAttachmentException",
]
