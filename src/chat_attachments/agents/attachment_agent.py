"""Send chat messages with attachments to an LLM through LiteLLM."""

import logging
import os
from collections.abc import Sequence
from typing import Any

from dotenv import load_dotenv
from litellm import completion

from chat_attachments.files.processors import (
    AttachmentInput,
    parse_message_with_attachments,
)
from chat_attachments.models import ParsedMessage
from chat_attachments.utils.config import AttachmentSettings

logger = logging.getLogger(__name__)


def build_user_content(parsed: ParsedMessage) -> list[dict[str, Any]]:
    """Convert a parse result into OpenAI-format content parts.

    The message text (if any) comes first, followed by one ``image_url`` part
    per image block, each carrying a ``data:`` URL.

    Args:
        parsed: Result of ``parse_message_with_attachments``

    Returns:
        Content parts for a single ``user`` message
    """
    parts: list[dict[str, Any]] = []
    if parsed.message:
        parts.append({"type": "text", "text": parsed.message})
    for image in parsed.images:
        parts.append(
            {
                "type": "image_url",
                "image_url": {"url": f"data:{image.mime_type};base64,{image.data}"},
            }
        )
    return parts


class AttachmentAgent:
    """LLM agent that folds chat attachments into the user turn."""

    def __init__(
        self,
        model: str,
        api_key: str | None = None,
        max_tokens: int = 1000,
        settings: AttachmentSettings | None = None,
    ):
        """Initialize the agent.

        Args:
            model: The model name (e.g., 'gpt-4o', 'claude-3-haiku-20240307')
            api_key: The API key for authentication
            max_tokens: Maximum tokens for response (default: 1000)
            settings: Attachment limits; defaults to ``AttachmentSettings()``

        Raises:
            ValueError: If model or api_key is None
        """
        if model is None:
            raise ValueError("Model is required")
        if api_key is None:
            raise ValueError("API key is required")

        self.model = model
        self.api_key = api_key
        self.max_tokens = max_tokens
        self.settings = settings or AttachmentSettings()

    def build_messages(
        self,
        message: str,
        attachments: Sequence[AttachmentInput] | None = None,
        system_message: str | None = None,
        **parse_options: Any,
    ) -> list[dict[str, Any]]:
        """Parse attachments and assemble the LiteLLM ``messages`` list.

        A ``settings`` keyword replaces the agent's settings for this call.
        """
        settings = parse_options.pop("settings", None) or self.settings
        parsed = parse_message_with_attachments(
            message, attachments, settings=settings, **parse_options
        )
        messages: list[dict[str, Any]] = []
        if system_message:
            messages.append({"role": "system", "content": system_message})
        if parsed.images:
            messages.append({"role": "user", "content": build_user_content(parsed)})
        else:
            messages.append({"role": "user", "content": parsed.message})
        return messages

    def query(
        self,
        message: str,
        attachments: Sequence[AttachmentInput] | None = None,
        system_message: str | None = None,
        **parse_options: Any,
    ) -> str:
        """Send a message with attachments and return the response text.

        Args:
            message: The user message to send
            attachments: Chat attachments to include
            system_message: Optional system message to set context
            **parse_options: Forwarded to ``parse_message_with_attachments``

        Returns:
            The LLM's response as a string

        Raises:
            InvalidEncodingException: If an attachment is not valid base64
            SizeExceededException: If an attachment is empty or too large
        """
        messages = self.build_messages(
            message, attachments, system_message, **parse_options
        )
        logger.debug("Sending %d message(s) to %s", len(messages), self.model)
        response = completion(
            model=self.model,
            messages=messages,
            max_tokens=self.max_tokens,
            api_key=self.api_key,
        )
        return str(response.choices[0].message.content)


def create_attachment_agent(
    model: str,
    api_key: str | None = None,
    max_tokens: int = 1000,
    settings: AttachmentSettings | None = None,
) -> AttachmentAgent:
    """Create an attachment agent with environment-based configuration.

    Args:
        model: Model name (e.g., 'gpt-4o', 'claude-3-haiku-20240307')
        api_key: API key (if None, tries to infer from model and environment)
        max_tokens: Maximum tokens for response
        settings: Attachment limits

    Returns:
        Configured AttachmentAgent

    Raises:
        ValueError: If no API key is found and cannot be inferred
    """
    load_dotenv()

    if api_key is None:
        if model.startswith("gpt"):
            api_key = os.getenv("OPENAI_API_KEY")
        elif model.startswith("claude"):
            api_key = os.getenv("ANTHROPIC_API_KEY")

    if api_key is None:
        raise ValueError(
            f"API key not found for model '{model}'. Set appropriate environment "
            "variable or pass api_key parameter."
        )

    return AttachmentAgent(
        model=model, api_key=api_key, max_tokens=max_tokens, settings=settings
    )
