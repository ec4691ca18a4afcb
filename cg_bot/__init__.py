"""Common Ground Bot SDK.

Build bots for Common Ground communities: send messages to channels and
verify the webhook events the platform delivers.

Example:
    from cg_bot import BotClient

    async with BotClient(token="bot-token") as bot:
        await bot.send_message("community-id", "channel-id", text="Hello!")
"""

from cg_bot.api import (
    ApiErrorResponse,
    Attachment,
    BotApiError,
    BotApplicationError,
    BotClient,
    BotHTTPError,
    BotInvalidResponseError,
    BotMentionContent,
    BotNetworkError,
    BotTimeoutError,
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
from cg_bot.config import Settings
from cg_bot.webhooks import (
    FailureReason,
    VerificationResult,
    WebhookChannel,
    WebhookCommunity,
    WebhookEvent,
    WebhookEventType,
    WebhookMentionedBot,
    WebhookMessage,
    WebhookSender,
    WebhookSignatureMiddleware,
    WebhookVerificationError,
    WebhookVerifier,
    parse_webhook,
    verify_webhook,
)

__version__ = "0.1.0"

__all__ = [
    # Client
    "BotClient",
    "Settings",
    # Webhooks
    "FailureReason",
    "VerificationResult",
    "WebhookSignatureMiddleware",
    "WebhookVerificationError",
    "WebhookVerifier",
    "parse_webhook",
    "verify_webhook",
    # Errors
    "BotApiError",
    "BotApplicationError",
    "BotHTTPError",
    "BotInvalidResponseError",
    "BotNetworkError",
    "BotTimeoutError",
    # Messages
    "Attachment",
    "BotMentionContent",
    "ImageAttachment",
    "LinkContent",
    "LinkPreviewAttachment",
    "MentionContent",
    "MessageBody",
    "MessageContentItem",
    "NewlineContent",
    "TextContent",
    # API
    "ApiErrorResponse",
    "Message",
    "SendMessageResult",
    # Events
    "WebhookChannel",
    "WebhookCommunity",
    "WebhookEvent",
    "WebhookEventType",
    "WebhookMentionedBot",
    "WebhookMessage",
    "WebhookSender",
]
