"""HTTP implementation of the message service over httpx."""

import uuid
from collections.abc import Sequence
from typing import Any

import httpx
from loguru import logger
from pydantic import TypeAdapter, ValidationError

from config.settings import Settings
from messaging.models import (
    LoginCredentials,
    Message,
    MessageId,
    Registration,
    User,
)

from .base import MessageService
from .error_mapping import map_response_error, map_transport_error
from .exceptions import MessageServiceError
from .rate_limit import ServiceRateLimiter

_MESSAGE_LIST = TypeAdapter(list[Message])
_DEFAULT_RETRY_AFTER = 60.0


def _retry_after_seconds(response: httpx.Response) -> float:
    value = response.headers.get("Retry-After")
    try:
        return max(0.0, float(value)) if value else _DEFAULT_RETRY_AFTER
    except ValueError:
        return _DEFAULT_RETRY_AFTER


class HttpMessageService(MessageService):
    """Message board REST client.

    Endpoints (relative to base_url):
        GET  /messages                 root listing
        GET  /messages/{id}/replies    direct replies
        POST /messages                 create root or reply
        GET  /health                   reachability
        POST /users/login, /users/register
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: httpx.Timeout | None = None,
        rate_limiter: ServiceRateLimiter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._rate_limiter = rate_limiter or ServiceRateLimiter()
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout or httpx.Timeout(30.0, connect=2.0),
            headers={"Accept": "application/json"},
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "HttpMessageService":
        timeout = httpx.Timeout(
            settings.http_read_timeout,
            read=settings.http_read_timeout,
            write=settings.http_write_timeout,
            connect=settings.http_connect_timeout,
        )
        limiter = ServiceRateLimiter(
            settings.service_rate_limit, settings.service_rate_window
        )
        return cls(
            settings.api_base_url,
            timeout=timeout,
            rate_limiter=limiter,
            transport=transport,
        )

    async def _request(
        self,
        method: str,
        path: str,
        action: str,
        *,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        Raises:
            MessageServiceError: transport failure, error status or bad body
        """
        await self._rate_limiter.wait_if_blocked()

        with logger.contextualize(request_id=uuid.uuid4().hex[:8]):
            logger.debug(f"MESSAGE_SERVICE: {method} {path}")
            try:
                response = await self._client.request(method, path, json=json)
            except httpx.HTTPError as e:
                logger.error(f"MESSAGE_SERVICE: {action} transport error: {e}")
                raise map_transport_error(e, action) from e

            logger.debug(f"MESSAGE_SERVICE: {action} status={response.status_code}")
            if response.status_code == 429:
                self._rate_limiter.set_blocked(_retry_after_seconds(response))
            if response.is_error:
                error = map_response_error(response, action)
                logger.warning(f"MESSAGE_SERVICE: {error.message}")
                raise error

            try:
                return response.json()
            except ValueError as e:
                raise MessageServiceError(
                    f"{action} returned invalid JSON: {e}",
                    status_code=response.status_code,
                ) from e

    def _parse_messages(self, data: Any, action: str) -> list[Message]:
        try:
            return _MESSAGE_LIST.validate_python(data)
        except ValidationError as e:
            raise MessageServiceError(f"{action} returned malformed messages: {e}") from e

    async def list_messages(self) -> Sequence[Message]:
        data = await self._request("GET", "/messages", "Fetch messages")
        messages = self._parse_messages(data, "Fetch messages")
        logger.info(f"MESSAGE_SERVICE: fetched {len(messages)} root messages")
        return messages

    async def fetch_replies(self, message_id: MessageId) -> Sequence[Message]:
        action = "Fetch replies"
        data = await self._request("GET", f"/messages/{message_id}/replies", action)
        replies = self._parse_messages(data, action)
        logger.info(
            f"MESSAGE_SERVICE: fetched {len(replies)} replies for {message_id}"
        )
        return replies

    async def create_message(
        self, content: str, parent_id: MessageId | None = None
    ) -> Message:
        action = "Create message"
        payload: dict[str, Any] = {"content": content}
        if parent_id is not None:
            payload["parentId"] = str(parent_id)
        data = await self._request("POST", "/messages", action, json=payload)
        try:
            message = Message.model_validate(data)
        except ValidationError as e:
            raise MessageServiceError(f"{action} returned malformed message: {e}") from e
        logger.info(f"MESSAGE_SERVICE: created message {message.id}")
        return message

    async def check_health(self) -> bool:
        try:
            response = await self._client.get("/health")
        except httpx.HTTPError as e:
            logger.warning(f"MESSAGE_SERVICE: health check failed: {e}")
            return False
        logger.debug(f"MESSAGE_SERVICE: health status={response.status_code}")
        return response.is_success

    async def login(self, credentials: LoginCredentials) -> User:
        data = await self._request(
            "POST",
            "/users/login",
            "Login",
            json=credentials.model_dump(by_alias=True),
        )
        return self._parse_user(data, "Login")

    async def register(self, registration: Registration) -> User:
        data = await self._request(
            "POST",
            "/users/register",
            "Registration",
            json=registration.model_dump(by_alias=True),
        )
        return self._parse_user(data, "Registration")

    def _parse_user(self, data: Any, action: str) -> User:
        try:
            return User.model_validate(data)
        except ValidationError as e:
            raise MessageServiceError(f"{action} returned malformed user: {e}") from e

    async def aclose(self) -> None:
        await self._client.aclose()
