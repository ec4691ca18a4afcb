"""Webhook event models.

This module defines the structure of events the platform delivers to a
bot's webhook endpoint. Unknown fields are ignored so that new platform
fields do not break existing bots.
"""

from enum import Enum
from typing import Literal

from pydantic import Field

from cg_bot.api.models import Attachment, CamelModel, MessageBody


class WebhookEventType(str, Enum):
    """Supported webhook event types."""

    BOT_MENTIONED = "BOT_MENTIONED"


class WebhookCommunity(CamelModel):
    id: str
    name: str
    url: str


class WebhookChannel(CamelModel):
    id: str
    name: str
    type: Literal["text", "voice"]
    url: str


class WebhookMessage(CamelModel):
    """The message that triggered the event.

    Attributes:
        mention_index: Position of the bot mention within the body content.
    """

    id: str
    body: MessageBody
    attachments: list[Attachment] = Field(default_factory=list)
    created_at: str
    reply_to_message_id: str | None = None
    mention_index: int


class WebhookSender(CamelModel):
    id: str
    display_name: str
    username: str
    avatar_url: str | None = None


class WebhookMentionedBot(CamelModel):
    id: str
    name: str


class WebhookEvent(CamelModel):
    """Event payload delivered to the bot's webhook endpoint."""

    event: WebhookEventType
    event_id: str
    timestamp: str
    api_version: Literal["1"] = "1"
    community: WebhookCommunity
    channel: WebhookChannel
    message: WebhookMessage
    sender: WebhookSender
    mentioned_bot: WebhookMentionedBot
