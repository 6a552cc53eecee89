"""Input and output models for chat attachment parsing."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ChatAttachment(BaseModel):
    """A client-supplied attachment as it arrives from the chat transport.

    None of the fields are trusted. ``content`` is expected to be base64 text,
    optionally wrapped in a ``data:<mime>;base64,`` URL, but it is typed ``Any``
    so that malformed payloads surface as ``InvalidEncodingException`` from the
    decoder rather than as a model validation error.

    Both snake_case names and the wire (camelCase) aliases are accepted:

    Example:
        ```python
        ChatAttachment.model_validate(
            {"fileName": "notes.pdf", "mimeType": "application/pdf", "content": "..."}
        )
        ```
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str | None = None
    mime_type: str | None = Field(default=None, alias="mimeType")
    file_name: str | None = Field(default=None, alias="fileName")
    content: Any = None

    @field_validator("type", "mime_type", "file_name", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str | None:
        return str(value) if value else None


class ImageContent(BaseModel):
    """Structured image block suitable for direct inclusion in a model prompt."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    type: Literal["image"] = "image"
    data: str = Field(description="Base64 payload with any data URL prefix removed")
    mime_type: str = Field(alias="mimeType", description="Resolved image MIME type")

    def to_dict(self) -> dict[str, str]:
        """Return the wire representation (``type``, ``data``, ``mimeType``)."""
        return self.model_dump(by_alias=True)


class ParsedMessage(BaseModel):
    """Result of folding attachments into a chat message.

    Attributes:
        message: Original message text followed by one reference block per
            non-image attachment
        images: Image blocks in attachment order
    """

    message: str
    images: list[ImageContent] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation of the parse result."""
        return {
            "message": self.message,
            "images": [image.to_dict() for image in self.images],
        }
