"""Inbound webhook verification and parsing.

This module provides:
- verify_webhook: HMAC-SHA256 authenticity and freshness check
- parse_webhook: verify, then parse into a WebhookEvent
- WebhookEvent: typed event payload
- WebhookSignatureMiddleware / WebhookVerifier: ASGI and FastAPI glue
"""

from cg_bot.webhooks.events import (
    WebhookChannel,
    WebhookCommunity,
    WebhookEvent,
    WebhookEventType,
    WebhookMentionedBot,
    WebhookMessage,
    WebhookSender,
)
from cg_bot.webhooks.middleware import (
    WebhookRejection,
    WebhookSignatureMiddleware,
    WebhookVerifier,
)
from cg_bot.webhooks.security import (
    MAX_TIMESTAMP_AGE_MS,
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    FailureReason,
    VerificationResult,
    WebhookVerificationError,
    compute_signature,
    create_signature_headers,
    parse_webhook,
    verify_webhook,
)

__all__ = [
    # Events
    "WebhookChannel",
    "WebhookCommunity",
    "WebhookEvent",
    "WebhookEventType",
    "WebhookMentionedBot",
    "WebhookMessage",
    "WebhookSender",
    # Security
    "MAX_TIMESTAMP_AGE_MS",
    "SIGNATURE_HEADER",
    "TIMESTAMP_HEADER",
    "FailureReason",
    "VerificationResult",
    "WebhookVerificationError",
    "compute_signature",
    "create_signature_headers",
    "parse_webhook",
    "verify_webhook",
    # Middleware
    "WebhookRejection",
    "WebhookSignatureMiddleware",
    "WebhookVerifier",
]
