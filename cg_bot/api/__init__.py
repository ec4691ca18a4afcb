"""Outbound Bot API client.

This module provides:
- BotClient: Async client for sending messages
- Message, attachment and response models
- BotApiError hierarchy for request failures
"""

from cg_bot.api.client import BotClient
from cg_bot.api.errors import (
    BotApiError,
    BotApplicationError,
    BotHTTPError,
    BotInvalidResponseError,
    BotNetworkError,
    BotTimeoutError,
)
from cg_bot.api.models import (
    ApiErrorResponse,
    Attachment,
    BotMentionContent,
    ImageAttachment,
    LinkContent,
    LinkPreviewAttachment,
    MentionContent,
    Message,
    MessageBody,
    MessageContentItem,
    NewlineContent,
    SendMessageResult,
    TextContent,
)

__all__ = [
    # Client
    "BotClient",
    # Errors
    "BotApiError",
    "BotApplicationError",
    "BotHTTPError",
    "BotInvalidResponseError",
    "BotNetworkError",
    "BotTimeoutError",
    # Models
    "ApiErrorResponse",
    "Attachment",
    "BotMentionContent",
    "ImageAttachment",
    "LinkContent",
    "LinkPreviewAttachment",
    "MentionContent",
    "Message",
    "MessageBody",
    "MessageContentItem",
    "NewlineContent",
    "SendMessageResult",
    "TextContent",
]
