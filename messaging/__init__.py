"""Message board client layer.

Session and tree classes live in messaging.session and messaging.trees;
they depend on providers, which in turn imports these models.
"""

from .compose import ComposeDraft, ContentValidationError, validate_content
from .models import LoginCredentials, Message, MessageId, Registration, User

__all__ = [
    "ComposeDraft",
    "ContentValidationError",
    "LoginCredentials",
    "Message",
    "MessageId",
    "Registration",
    "User",
    "validate_content",
]
