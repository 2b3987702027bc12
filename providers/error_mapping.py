"""Map httpx failures to message service errors."""

import httpx

from .exceptions import (
    MessageNotFoundError,
    MessageRejectedError,
    MessageServiceError,
    ServiceConnectivityError,
)

# Service error bodies can be whole HTML pages
_MAX_DETAIL_CHARS = 300


def _detail(response: httpx.Response) -> str:
    text = response.text.strip()
    if len(text) > _MAX_DETAIL_CHARS:
        return text[:_MAX_DETAIL_CHARS] + "..."
    return text


def map_response_error(response: httpx.Response, action: str) -> MessageServiceError:
    """Build the error for a non-success response."""
    status = response.status_code
    detail = _detail(response)
    message = f"{action} failed: {status} - {detail}"

    if status == 404:
        return MessageNotFoundError(message, status_code=status)
    if status == 429:
        return ServiceConnectivityError(
            message,
            status_code=status,
            user_message="The message board is busy. Please try again shortly.",
        )
    if status >= 500:
        return ServiceConnectivityError(message, status_code=status)
    if status in (401, 403):
        return MessageRejectedError(
            message,
            status_code=status,
            user_message="You are not allowed to do that. Please log in again.",
        )
    return MessageRejectedError(
        message,
        status_code=status,
        user_message=f"{action} was rejected: {detail}"
        if detail
        else MessageRejectedError.default_user_message,
    )


def map_transport_error(e: httpx.HTTPError, action: str) -> MessageServiceError:
    """Build the error for a request that never got a response."""
    if isinstance(e, httpx.TimeoutException):
        return ServiceConnectivityError(
            f"{action} timed out: {e}",
            user_message="The message board took too long to respond.",
        )
    return ServiceConnectivityError(f"{action} could not reach server: {e}")
