"""Webhook security utilities.

Provides HMAC signature generation and verification for inbound webhook
payloads to ensure authenticity and prevent replay.

The signature is computed as:
    HMAC-SHA256(secret, timestamp + "." + raw_body)

where timestamp is the X-CG-Timestamp header value (epoch milliseconds)
exactly as received, and raw_body is the request body bytes exactly as
received. Any re-serialization of the body invalidates the signature.

Verification returns a VerificationResult instead of raising, so callers
can branch on the failure reason directly.
"""

import binascii
import hashlib
import hmac
import re
import time
from dataclasses import dataclass
from enum import Enum

import structlog

from cg_bot.webhooks.events import WebhookEvent

logger = structlog.get_logger(__name__)

SIGNATURE_HEADER = "X-CG-Signature"
TIMESTAMP_HEADER = "X-CG-Timestamp"

# Timestamp validity window (5 minutes), applied to past and future skew
MAX_TIMESTAMP_AGE_MS = 5 * 60 * 1000

SIGNATURE_PREFIX = "sha256="
DIGEST_SIZE = hashlib.sha256().digest_size

# Epoch milliseconds need 13 digits; the bound keeps int() conversion cheap and safe
MAX_TIMESTAMP_DIGITS = 20
_TIMESTAMP_PATTERN = re.compile(rf"[0-9]{{1,{MAX_TIMESTAMP_DIGITS}}}")


class FailureReason(str, Enum):
    """Why a webhook failed verification."""

    MALFORMED_TIMESTAMP = "MALFORMED_TIMESTAMP"
    TIMESTAMP_EXPIRED = "TIMESTAMP_EXPIRED"
    MALFORMED_SIGNATURE = "MALFORMED_SIGNATURE"
    SIGNATURE_MISMATCH = "SIGNATURE_MISMATCH"


class WebhookVerificationError(Exception):
    """Raised by VerificationResult.raise_for_failure().

    Attributes:
        reason: The failure reason.
        age_ms: Observed timestamp age for TIMESTAMP_EXPIRED, else None.
    """

    def __init__(self, reason: FailureReason, message: str, age_ms: int | None = None) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message
        self.age_ms = age_ms


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of verifying (and optionally parsing) a webhook.

    Truthy on success. On failure, reason and message describe why; age_ms
    is set for TIMESTAMP_EXPIRED. event is populated only by parse_webhook.

    Attributes:
        reason: Failure reason, or None on success.
        message: Human-readable description of the failure.
        age_ms: Observed |now - timestamp| for expired timestamps.
        event: Parsed webhook event (parse_webhook success only).
    """

    reason: FailureReason | None = None
    message: str = ""
    age_ms: int | None = None
    event: WebhookEvent | None = None

    @property
    def ok(self) -> bool:
        return self.reason is None

    def __bool__(self) -> bool:
        return self.ok

    def raise_for_failure(self) -> "VerificationResult":
        """Raise WebhookVerificationError on failure, else return self."""
        if self.reason is not None:
            raise WebhookVerificationError(self.reason, self.message, self.age_ms)
        return self


def _failure(
    reason: FailureReason,
    message: str,
    *,
    age_ms: int | None = None,
) -> VerificationResult:
    logger.warning("webhook_verification_failed", reason=reason.value, age_ms=age_ms)
    return VerificationResult(reason=reason, message=message, age_ms=age_ms)


def _to_bytes(value: bytes | str) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def current_time_ms() -> int:
    """Current wall-clock time in milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000


def compute_signature(
    payload: bytes | str,
    secret: bytes | str,
    timestamp: str,
) -> str:
    """Compute the lowercase hex HMAC-SHA256 signature for a payload.

    Args:
        payload: Raw body bytes (str is UTF-8 encoded).
        secret: Shared webhook secret.
        timestamp: Timestamp string exactly as sent in the header.

    Returns:
        Hex digest without algorithm prefix.
    """
    signed_payload = timestamp.encode("ascii") + b"." + _to_bytes(payload)
    return hmac.new(_to_bytes(secret), signed_payload, hashlib.sha256).hexdigest()


def create_signature_headers(
    payload: bytes | str,
    secret: bytes | str,
    *,
    timestamp: int | None = None,
) -> dict[str, str]:
    """Create HTTP headers signing a payload the way the platform does.

    Args:
        payload: Raw body to sign.
        secret: Shared webhook secret.
        timestamp: Epoch milliseconds (defaults to now).

    Returns:
        Dictionary of headers to include in the request.
    """
    if timestamp is None:
        timestamp = current_time_ms()

    timestamp_str = str(timestamp)
    signature = compute_signature(payload, secret, timestamp_str)

    return {
        SIGNATURE_HEADER: f"{SIGNATURE_PREFIX}{signature}",
        TIMESTAMP_HEADER: timestamp_str,
    }


def verify_webhook(
    payload: bytes | str,
    signature: str,
    timestamp: str,
    secret: bytes | str,
    *,
    now: int | None = None,
    max_age_ms: int = MAX_TIMESTAMP_AGE_MS,
) -> VerificationResult:
    """Verify the authenticity and freshness of a webhook payload.

    Checks run in a fixed order and stop at the first failure: timestamp
    format (at most MAX_TIMESTAMP_DIGITS ASCII digits), timestamp age,
    signature format, signature value.

    Args:
        payload: Raw request body exactly as received.
        signature: X-CG-Signature value, with or without "sha256=" prefix.
        timestamp: X-CG-Timestamp value (epoch milliseconds).
        secret: Shared webhook secret.
        now: Current time in epoch milliseconds (defaults to wall clock).
        max_age_ms: Maximum allowed |now - timestamp|.

    Returns:
        VerificationResult, truthy if the webhook is authentic and fresh.
    """
    if not isinstance(timestamp, str) or not _TIMESTAMP_PATTERN.fullmatch(timestamp):
        return _failure(FailureReason.MALFORMED_TIMESTAMP, "Invalid timestamp format")

    message_time = int(timestamp)
    if now is None:
        now = current_time_ms()

    age = abs(now - message_time)
    if age > max_age_ms:
        return _failure(
            FailureReason.TIMESTAMP_EXPIRED,
            f"Timestamp is outside the allowed window ({age / 1000:.0f}s). "
            f"Max allowed: {max_age_ms / 1000:.0f}s",
            age_ms=age,
        )

    signature_value = signature
    if signature_value.startswith(SIGNATURE_PREFIX):
        signature_value = signature_value[len(SIGNATURE_PREFIX) :]

    try:
        supplied = binascii.unhexlify(signature_value)
    except (binascii.Error, ValueError):
        return _failure(FailureReason.MALFORMED_SIGNATURE, "Signature is not valid hex")

    if len(supplied) != DIGEST_SIZE:
        return _failure(
            FailureReason.MALFORMED_SIGNATURE,
            f"Signature must be {DIGEST_SIZE} bytes, got {len(supplied)}",
        )

    expected = bytes.fromhex(compute_signature(payload, secret, timestamp))

    # Constant-time comparison to prevent timing attacks
    if not hmac.compare_digest(supplied, expected):
        return _failure(FailureReason.SIGNATURE_MISMATCH, "Signature mismatch")

    logger.debug("webhook_signature_verified", timestamp=message_time, age_ms=age)
    return VerificationResult()


def parse_webhook(
    payload: bytes | str,
    signature: str,
    timestamp: str,
    secret: bytes | str,
    *,
    now: int | None = None,
    max_age_ms: int = MAX_TIMESTAMP_AGE_MS,
) -> VerificationResult:
    """Verify a webhook and, only if authentic, parse it into a WebhookEvent.

    The payload is never deserialized when verification fails; the failure
    result is returned unchanged.

    Args:
        payload: Raw request body exactly as received.
        signature: X-CG-Signature value.
        timestamp: X-CG-Timestamp value.
        secret: Shared webhook secret.
        now: Current time in epoch milliseconds (defaults to wall clock).
        max_age_ms: Maximum allowed |now - timestamp|.

    Returns:
        VerificationResult with event populated on success.

    Raises:
        pydantic.ValidationError: If an authentic payload does not match
            the WebhookEvent schema.
    """
    result = verify_webhook(
        payload,
        signature,
        timestamp,
        secret,
        now=now,
        max_age_ms=max_age_ms,
    )
    if not result:
        return result

    event = WebhookEvent.model_validate_json(payload)
    logger.debug(
        "webhook_event_parsed",
        event_type=event.event.value,
        event_id=event.event_id,
    )
    return VerificationResult(event=event)
