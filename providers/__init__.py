"""Message service clients."""

from .base import MessageService
from .exceptions import (
    MessageNotFoundError,
    MessageRejectedError,
    MessageServiceError,
    ServiceConnectivityError,
)
from .message_service import HttpMessageService
from .rate_limit import ServiceRateLimiter

__all__ = [
    "HttpMessageService",
    "MessageNotFoundError",
    "MessageRejectedError",
    "MessageService",
    "MessageServiceError",
    "ServiceConnectivityError",
    "ServiceRateLimiter",
]
