"""Async client for the Common Ground Bot API.

Example:
    async with BotClient(token="bot-token") as bot:
        result = await bot.send_message(
            "community-id",
            "channel-id",
            text="Hello from my bot!",
        )
        print(result.message.id)
"""

from collections.abc import Sequence
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from cg_bot.api.errors import (
    BotApplicationError,
    BotHTTPError,
    BotInvalidResponseError,
    BotNetworkError,
    BotTimeoutError,
)
from cg_bot.api.models import ApiErrorResponse, Attachment, MessageBody, SendMessageResult
from cg_bot.config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_SECONDS, Settings

logger = structlog.get_logger(__name__)

SEND_MESSAGE_PATH = "/api/v2/Bot/sendMessage"


def _parse_api_error(payload: Any) -> ApiErrorResponse | None:
    """Parse an {error, message} payload, or None if the body has no usable error."""
    if not isinstance(payload, dict) or "error" not in payload:
        return None
    try:
        return ApiErrorResponse.model_validate(payload)
    except ValidationError:
        return None


class BotClient:
    """Async client for the Bot API.

    Every failure is raised as a BotApiError subclass; nothing is retried.
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        debug: bool = False,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            token: Bot authentication token.
            base_url: API base URL (trailing slash is ignored).
            timeout: Request timeout in seconds.
            debug: Log request and response bodies at debug level.
            http_client: Optional pre-configured httpx client. The caller
                keeps ownership and must close it.

        Raises:
            ValueError: If token is empty.
        """
        if not token:
            raise ValueError("Bot token is required")

        self._token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.debug = debug
        self._client = http_client
        self._owns_client = http_client is None
        self._logger = logger.bind(component="bot_client")

    @classmethod
    def from_settings(cls, settings: Settings) -> "BotClient":
        """Create a client from SDK settings.

        Raises:
            ValueError: If settings carry no bot token.
        """
        return cls(
            settings.BOT_TOKEN or "",
            base_url=settings.CG_BASE_URL,
            timeout=settings.CG_REQUEST_TIMEOUT,
            debug=settings.DEBUG_SDK,
        )

    async def __aenter__(self) -> "BotClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create httpx client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def send_message(
        self,
        community_id: str,
        channel_id: str,
        *,
        text: str | None = None,
        body: MessageBody | None = None,
        attachments: Sequence[Attachment] | None = None,
        reply_to: str | None = None,
    ) -> SendMessageResult:
        """Send a message to a channel.

        Args:
            community_id: Target community.
            channel_id: Target channel.
            text: Simple text message, converted to a body internally.
            body: Rich message body; takes precedence over text.
            attachments: Attachments to include.
            reply_to: Message id to reply to.

        Returns:
            The created message.

        Raises:
            BotApiError: If the request fails in any way.
        """
        message_body = body or MessageBody.from_text(text)

        data = {
            "communityId": community_id,
            "channelId": channel_id,
            "body": message_body.to_api_dict(),
            "attachments": [a.to_api_dict() for a in attachments or []],
            "replyToMessageId": reply_to or None,
        }

        status_code, response_data = await self._request(SEND_MESSAGE_PATH, data)

        try:
            result = SendMessageResult.model_validate(response_data)
        except ValidationError as e:
            raise BotInvalidResponseError(
                f"Unexpected sendMessage response: {e.error_count()} validation errors",
                status_code,
            ) from e

        self._logger.info(
            "message_sent",
            community_id=community_id,
            channel_id=channel_id,
            message_id=result.message.id,
        )
        return result

    async def _request(self, path: str, data: dict[str, Any]) -> tuple[int, dict[str, Any]]:
        """Make an authenticated POST request to the Bot API.

        Args:
            path: API path (e.g., "/api/v2/Bot/sendMessage").
            data: JSON body.

        Returns:
            Tuple of (status_code, decoded JSON response).

        Raises:
            BotTimeoutError: If the request times out.
            BotNetworkError: If no response was received.
            BotInvalidResponseError: If the response is not JSON.
            BotHTTPError: For non-2xx responses.
            BotApplicationError: For 2xx responses carrying an error.
        """
        client = await self._get_client()
        url = f"{self.base_url}{path}"

        if self.debug:
            self._logger.debug("bot_api_request", url=url, body=data)

        try:
            response = await client.post(
                url,
                json=data,
                headers={"Authorization": f"Bot {self._token}"},
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            self._logger.warning("bot_api_timeout", url=url, timeout=self.timeout)
            raise BotTimeoutError(self.timeout) from e
        except httpx.RequestError as e:
            self._logger.error("bot_api_network_error", url=url, error=str(e))
            raise BotNetworkError(str(e)) from e

        if self.debug:
            self._logger.debug(
                "bot_api_response",
                url=url,
                status=response.status_code,
                body=response.text,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise BotInvalidResponseError(
                f"Invalid JSON response: {response.text}",
                response.status_code,
            ) from e

        api_error = _parse_api_error(payload)
        error_code = api_error.error if api_error else None
        error_message = api_error.message if api_error else None

        if not response.is_success:
            self._logger.warning(
                "bot_api_error_response",
                url=url,
                status=response.status_code,
                error=error_code,
            )
            raise BotHTTPError(
                error_code or "UNKNOWN_ERROR",
                error_message or f"Request failed with status {response.status_code}",
                response.status_code,
            )

        # The API sometimes reports failures with a 200 status
        is_error_status = isinstance(payload, dict) and payload.get("status") == "ERROR"
        if is_error_status or error_code:
            self._logger.warning(
                "bot_api_application_error",
                url=url,
                status=response.status_code,
                error=error_code,
            )
            raise BotApplicationError(
                error_code or "UNKNOWN_ERROR",
                error_message or "Request failed",
                response.status_code,
            )

        if not isinstance(payload, dict):
            raise BotInvalidResponseError(
                f"Expected a JSON object, got {type(payload).__name__}",
                response.status_code,
            )

        return response.status_code, payload
