"""Message service interface consumed by the tree controller."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from messaging.models import (
    LoginCredentials,
    Message,
    MessageId,
    Registration,
    User,
)


class MessageService(ABC):
    """Remote message store. Implementations raise MessageServiceError subclasses."""

    @abstractmethod
    async def list_messages(self) -> Sequence[Message]:
        """Root messages, most recent first."""

    @abstractmethod
    async def fetch_replies(self, message_id: MessageId) -> Sequence[Message]:
        """Direct replies of a message."""

    @abstractmethod
    async def create_message(
        self, content: str, parent_id: MessageId | None = None
    ) -> Message:
        """Create a root message or a reply; returns the stored message."""

    @abstractmethod
    async def check_health(self) -> bool:
        """Return True if the service answers its health check. Never raises."""

    @abstractmethod
    async def login(self, credentials: LoginCredentials) -> User:
        """Authenticate a user."""

    @abstractmethod
    async def register(self, registration: Registration) -> User:
        """Create a user account."""

    async def aclose(self) -> None:
        """Release transport resources."""
