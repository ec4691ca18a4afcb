"""Webhook verification for ASGI/FastAPI applications.

This module provides:
- WebhookSignatureMiddleware: pure ASGI middleware guarding webhook paths
- WebhookVerifier: FastAPI dependency returning the verified WebhookEvent

Both read the raw request body before anything parses it, so the bytes
being verified are exactly the bytes that were signed.

Outcome mapping:
    missing signature/timestamp header -> 401 MISSING_HEADERS
    raw body unavailable               -> 500 MISSING_RAW_BODY
    verification failed                -> 401 INVALID_SIGNATURE
    unexpected error                   -> 500 VERIFICATION_ERROR
    body does not match event schema   -> 400 INVALID_PAYLOAD (dependency only)
"""

from collections.abc import Collection
from typing import Any

import structlog
from fastapi import HTTPException, Request
from pydantic import ValidationError
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from cg_bot.webhooks.events import WebhookEvent
from cg_bot.webhooks.security import (
    MAX_TIMESTAMP_AGE_MS,
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    VerificationResult,
    parse_webhook,
    verify_webhook,
)

logger = structlog.get_logger(__name__)


class WebhookRejection(Exception):
    """A webhook request that must not reach the application.

    Attributes:
        status_code: HTTP status to respond with.
        error: Machine-readable error code.
        message: Human-readable description.
        reason: Verifier failure reason, for INVALID_SIGNATURE.
    """

    def __init__(
        self,
        status_code: int,
        error: str,
        message: str,
        *,
        reason: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error = error
        self.message = message
        self.reason = reason

    def to_dict(self) -> dict[str, Any]:
        data = {"error": self.error, "message": self.message}
        if self.reason:
            data["reason"] = self.reason
        return data


async def authenticate_request(
    request: Request,
    secret: bytes | str,
    *,
    parse: bool = False,
    max_age_ms: int = MAX_TIMESTAMP_AGE_MS,
) -> tuple[bytes, VerificationResult]:
    """Verify a webhook request from its headers and raw body.

    Args:
        request: Incoming request whose body has not been parsed yet.
        secret: Shared webhook secret.
        parse: Also parse the body into a WebhookEvent.
        max_age_ms: Maximum allowed timestamp age.

    Returns:
        Tuple of (raw_body, successful verification result).

    Raises:
        WebhookRejection: If the request must be rejected.
    """
    signature = request.headers.get(SIGNATURE_HEADER)
    timestamp = request.headers.get(TIMESTAMP_HEADER)

    if not signature or not timestamp:
        raise WebhookRejection(
            401,
            "MISSING_HEADERS",
            f"Missing {SIGNATURE_HEADER} or {TIMESTAMP_HEADER} headers",
        )

    try:
        raw_body = await request.body()
    except RuntimeError as e:
        # Starlette raises once the stream was consumed without being cached
        logger.error("webhook_raw_body_unavailable", path=request.url.path, error=str(e))
        raise WebhookRejection(
            500,
            "MISSING_RAW_BODY",
            "Raw body not available. Verify webhooks before anything reads the request stream.",
        ) from e

    verify = parse_webhook if parse else verify_webhook
    try:
        result = verify(raw_body, signature, timestamp, secret, max_age_ms=max_age_ms)
    except ValidationError as e:
        raise WebhookRejection(
            400,
            "INVALID_PAYLOAD",
            f"Webhook payload does not match the event schema ({e.error_count()} errors)",
        ) from e
    except Exception as e:
        logger.exception("webhook_verification_error", path=request.url.path)
        raise WebhookRejection(500, "VERIFICATION_ERROR", "Webhook verification failed") from e

    if not result:
        raise WebhookRejection(
            401,
            "INVALID_SIGNATURE",
            result.message,
            reason=result.reason.value if result.reason else None,
        )

    return raw_body, result


def _require_secret(secret: bytes | str) -> bytes | str:
    if not secret:
        raise ValueError("Webhook secret is required")
    return secret


class WebhookSignatureMiddleware:
    """ASGI middleware rejecting unauthenticated webhook requests.

    Verified requests are passed on unchanged: the raw body is replayed to
    the wrapped application.

    Example:
        app = FastAPI()
        app.add_middleware(
            WebhookSignatureMiddleware,
            secret=settings.WEBHOOK_SECRET,
            paths=["/webhook"],
        )
    """

    def __init__(
        self,
        app: ASGIApp,
        secret: bytes | str,
        *,
        paths: Collection[str] | None = None,
        max_age_ms: int = MAX_TIMESTAMP_AGE_MS,
    ) -> None:
        """Initialize the middleware.

        Args:
            app: Wrapped ASGI application.
            secret: Shared webhook secret.
            paths: Request paths to guard (None guards every HTTP request).
            max_age_ms: Maximum allowed timestamp age.

        Raises:
            ValueError: If secret is empty.
        """
        self.app = app
        self._secret = _require_secret(secret)
        self._paths = frozenset(paths) if paths is not None else None
        self._max_age_ms = max_age_ms

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or (
            self._paths is not None and scope["path"] not in self._paths
        ):
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        try:
            raw_body, _ = await authenticate_request(
                request, self._secret, max_age_ms=self._max_age_ms
            )
        except WebhookRejection as rejection:
            logger.warning(
                "webhook_rejected",
                path=scope["path"],
                error=rejection.error,
                reason=rejection.reason,
            )
            response = JSONResponse(rejection.to_dict(), status_code=rejection.status_code)
            await response(scope, receive, send)
            return

        body_replayed = False

        async def replay_receive() -> Message:
            nonlocal body_replayed
            if not body_replayed:
                body_replayed = True
                return {"type": "http.request", "body": raw_body, "more_body": False}
            return await receive()

        await self.app(scope, replay_receive, send)


class WebhookVerifier:
    """FastAPI dependency that verifies and parses a webhook request.

    Example:
        verifier = WebhookVerifier(settings.WEBHOOK_SECRET)

        @app.post("/webhook")
        async def webhook(event: WebhookEvent = Depends(verifier)):
            ...
    """

    def __init__(
        self,
        secret: bytes | str,
        *,
        max_age_ms: int = MAX_TIMESTAMP_AGE_MS,
    ) -> None:
        self._secret = _require_secret(secret)
        self._max_age_ms = max_age_ms

    async def __call__(self, request: Request) -> WebhookEvent:
        try:
            _, result = await authenticate_request(
                request, self._secret, parse=True, max_age_ms=self._max_age_ms
            )
        except WebhookRejection as rejection:
            logger.warning(
                "webhook_rejected",
                path=request.url.path,
                error=rejection.error,
                reason=rejection.reason,
            )
            raise HTTPException(
                status_code=rejection.status_code,
                detail=rejection.to_dict(),
            ) from rejection

        return result.event  # type: ignore[return-value]
