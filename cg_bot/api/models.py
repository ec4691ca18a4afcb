"""Message and attachment models for the Bot API.

This module defines the Pydantic models for message bodies, content items,
attachments and the send-message request/response. Models serialize to the
platform's camelCase JSON and accept either camelCase or snake_case input.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model using camelCase aliases on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_api_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dictionary using wire field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ============================================================================
# Message Content
# ============================================================================


class TextContent(CamelModel):
    """Plain text run with optional formatting flags."""

    type: Literal["text"] = "text"
    value: str
    bold: bool | None = None
    italic: bool | None = None
    underline: bool | None = None
    strikethrough: bool | None = None
    code: bool | None = None


class LinkContent(CamelModel):
    """Hyperlink with display text."""

    type: Literal["link"] = "link"
    value: str
    url: str


class MentionContent(CamelModel):
    """Mention of a community member."""

    type: Literal["mention"] = "mention"
    user_id: str
    alias: str | None = None


class BotMentionContent(CamelModel):
    """Mention of a bot."""

    type: Literal["botMention"] = "botMention"
    bot_id: str
    alias: str | None = None


class NewlineContent(CamelModel):
    type: Literal["newline"] = "newline"


MessageContentItem = Annotated[
    TextContent | LinkContent | MentionContent | BotMentionContent | NewlineContent,
    Field(discriminator="type"),
]


class MessageBody(CamelModel):
    """Rich message body in the platform's versioned content format.

    Attributes:
        version: Body format version (always "1").
        content: Ordered content items.
    """

    version: Literal["1"] = "1"
    content: list[MessageContentItem] = Field(default_factory=list)

    @classmethod
    def from_text(cls, text: str | None) -> "MessageBody":
        """Build a body holding a single text item (empty for empty text)."""
        if not text:
            return cls()
        return cls(content=[TextContent(value=text)])


# ============================================================================
# Attachments
# ============================================================================


class ImageAttachment(CamelModel):
    """Previously uploaded image referenced by file id."""

    type: Literal["image"] = "image"
    file_id: str
    width: int | None = None
    height: int | None = None


class LinkPreviewAttachment(CamelModel):
    """Link preview card."""

    type: Literal["linkPreview"] = "linkPreview"
    url: str
    title: str | None = None
    description: str | None = None
    image_url: str | None = None


Attachment = Annotated[
    ImageAttachment | LinkPreviewAttachment,
    Field(discriminator="type"),
]


# ============================================================================
# API Models
# ============================================================================


class Message(CamelModel):
    """A message as returned by the Bot API."""

    id: str
    channel_id: str
    body: MessageBody
    attachments: list[Attachment] = Field(default_factory=list)
    created_at: str
    updated_at: str
    bot_id: str
    parent_message_id: str | None = None


class SendMessageResult(CamelModel):
    """Response of the sendMessage endpoint."""

    message: Message


class ApiErrorResponse(CamelModel):
    """Structured error payload returned by the Bot API."""

    error: str
    message: str | None = None
