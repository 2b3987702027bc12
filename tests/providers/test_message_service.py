"""Tests for providers/message_service.py."""

import json

import httpx
import pytest

from config.settings import Settings
from messaging.models import LoginCredentials
from providers.exceptions import (
    MessageNotFoundError,
    MessageRejectedError,
    MessageServiceError,
    ServiceConnectivityError,
)
from providers.message_service import HttpMessageService
from providers.rate_limit import ServiceRateLimiter

BASE_URL = "http://board.test/api/v1"


def _wire(msg_id, parent_id=None, **extra) -> dict:
    data = {
        "id": msg_id,
        "content": f"message {msg_id}",
        "username": "gina",
        "createdAt": "2024-05-01T10:00:00Z",
        "lastModifiedAt": "2024-05-01T10:00:00Z",
        "repliedToId": parent_id,
        "replies": None,
    }
    data.update(extra)
    return data


def _make_service(handler, limiter=None) -> HttpMessageService:
    return HttpMessageService(
        BASE_URL,
        rate_limiter=limiter or ServiceRateLimiter(100, 1.0),
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_list_messages():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path))
        return httpx.Response(200, json=[_wire(2, replyCount=4), _wire(1)])

    service = _make_service(handler)
    messages = await service.list_messages()

    assert seen == [("GET", "/api/v1/messages")]
    assert [m.id for m in messages] == [2, 1]
    assert messages[0].author == "gina"
    assert messages[0].reply_count == 4
    await service.aclose()


@pytest.mark.asyncio
async def test_fetch_replies():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v1/messages/7/replies"
        return httpx.Response(200, json=[_wire(8, parent_id=7)])

    service = _make_service(handler)
    replies = await service.fetch_replies(7)

    assert [(r.id, r.parent_id) for r in replies] == [(8, 7)]


@pytest.mark.asyncio
async def test_fetch_replies_not_found():
    service = _make_service(lambda request: httpx.Response(404, text="Message not found"))

    with pytest.raises(MessageNotFoundError) as exc_info:
        await service.fetch_replies(7)

    assert exc_info.value.status_code == 404
    assert "Message not found" in exc_info.value.message


@pytest.mark.asyncio
async def test_create_reply_sends_parent_id():
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(201, json=_wire(9, parent_id=7))

    service = _make_service(handler)
    created = await service.create_message("hello there", parent_id=7)

    assert bodies == [{"content": "hello there", "parentId": "7"}]
    assert created.id == 9
    assert created.parent_id == 7


@pytest.mark.asyncio
async def test_create_root_omits_parent_id():
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(201, json=_wire(10))

    service = _make_service(handler)
    await service.create_message("a root post")

    assert bodies == [{"content": "a root post"}]


@pytest.mark.asyncio
async def test_create_rejected():
    service = _make_service(
        lambda request: httpx.Response(400, text="content must be at least 3 characters")
    )

    with pytest.raises(MessageRejectedError) as exc_info:
        await service.create_message("hi")

    assert exc_info.value.status_code == 400
    assert "at least 3 characters" in exc_info.value.user_message


@pytest.mark.asyncio
async def test_server_error_is_connectivity():
    service = _make_service(lambda request: httpx.Response(503, text="unavailable"))

    with pytest.raises(ServiceConnectivityError):
        await service.list_messages()


@pytest.mark.asyncio
async def test_transport_error_is_connectivity():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    service = _make_service(handler)

    with pytest.raises(ServiceConnectivityError, match="could not reach server"):
        await service.list_messages()


@pytest.mark.asyncio
async def test_too_many_requests_blocks_limiter():
    limiter = ServiceRateLimiter(100, 1.0)
    service = _make_service(
        lambda request: httpx.Response(429, headers={"Retry-After": "30"}),
        limiter=limiter,
    )

    with pytest.raises(ServiceConnectivityError):
        await service.list_messages()

    assert limiter.is_blocked() is True
    assert 0 < limiter.remaining_wait() <= 30


@pytest.mark.asyncio
async def test_invalid_json_body():
    service = _make_service(lambda request: httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(MessageServiceError, match="invalid JSON"):
        await service.list_messages()


@pytest.mark.asyncio
async def test_malformed_messages():
    service = _make_service(lambda request: httpx.Response(200, json=[{"id": 1}]))

    with pytest.raises(MessageServiceError, match="malformed messages"):
        await service.list_messages()


@pytest.mark.asyncio
async def test_check_health():
    ok = _make_service(lambda request: httpx.Response(200))
    failing = _make_service(lambda request: httpx.Response(500))

    def unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    down = _make_service(unreachable)

    assert await ok.check_health() is True
    assert await failing.check_health() is False
    assert await down.check_health() is False


@pytest.mark.asyncio
async def test_login_posts_camel_case_credentials():
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v1/users/login"
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={"id": 3, "username": "gina", "email": "g@x.io"})

    service = _make_service(handler)
    user = await service.login(
        LoginCredentials(username_or_email="gina", password="pw", remember_me=True)
    )

    assert bodies == [{"usernameOrEmail": "gina", "password": "pw", "rememberMe": True}]
    assert user.id == "3"


def test_from_settings_applies_timeouts():
    settings = Settings(
        api_base_url="http://example.test/api/v1/",
        http_read_timeout=12.0,
        http_write_timeout=4.0,
        http_connect_timeout=1.5,
    )

    service = HttpMessageService.from_settings(settings)

    timeout = service._client.timeout
    assert timeout.read == 12.0
    assert timeout.write == 4.0
    assert timeout.connect == 1.5
    assert str(service._client.base_url) == "http://example.test/api/v1/"
