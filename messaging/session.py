"""Board session: one reply-tree cache per logged-in user."""

import uuid

from loguru import logger

from config.logging_config import configure_logging
from config.settings import Settings, get_settings
from providers.base import MessageService
from providers.message_service import HttpMessageService

from .compose import ComposeDraft, validate_content
from .models import LoginCredentials, Message, MessageId, Registration, User
from .trees.controller import ChangeCallback, ErrorCallback, TreeController
from .trees.repository import MessageTreeCache


class SessionNotActiveError(RuntimeError):
    """Board accessed while nobody is logged in."""


class BoardSession:
    """
    Owns the tree cache and controller between login and logout.

    Logging out drops the cache; the next login builds a fresh one, so no
    tree state leaks between users.
    """

    def __init__(
        self,
        service: MessageService,
        change_callback: ChangeCallback | None = None,
        error_callback: ErrorCallback | None = None,
    ):
        self._service = service
        self._change_callback = change_callback
        self._error_callback = error_callback
        self._user: User | None = None
        self._controller: TreeController | None = None
        self._session_id: str | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        change_callback: ChangeCallback | None = None,
        error_callback: ErrorCallback | None = None,
    ) -> "BoardSession":
        """Build a session over the HTTP service, with logging set up from settings."""
        settings = settings or get_settings()
        configure_logging(
            settings.log_file,
            level=settings.log_level,
            rotation=settings.log_rotation,
            retention=settings.log_retention,
        )
        logger.info(f"SESSION: message service at {settings.api_base_url}")
        return cls(
            HttpMessageService.from_settings(settings),
            change_callback=change_callback,
            error_callback=error_callback,
        )

    @property
    def user(self) -> User | None:
        return self._user

    @property
    def is_active(self) -> bool:
        return self._controller is not None

    @property
    def controller(self) -> TreeController:
        if self._controller is None:
            raise SessionNotActiveError("Not logged in")
        return self._controller

    @property
    def cache(self) -> MessageTreeCache:
        return self.controller.cache

    async def login(self, credentials: LoginCredentials) -> User:
        """
        Authenticate and load the board.

        Raises:
            MessageServiceError: login rejected or service unreachable; the
                session stays logged out.
        """
        if not await self._service.check_health():
            logger.warning("SESSION: message service may not be running or reachable")

        user = await self._service.login(credentials)
        await self._start(user)
        return user

    async def register(self, registration: Registration) -> User:
        """Create an account and start a session for it."""
        user = await self._service.register(registration)
        await self._start(user)
        return user

    async def _start(self, user: User) -> None:
        if self._controller is not None:
            self.logout()

        self._user = user
        self._session_id = uuid.uuid4().hex[:8]
        self._controller = TreeController(
            MessageTreeCache(),
            self._service,
            change_callback=self._change_callback,
            error_callback=self._error_callback,
        )
        with logger.contextualize(session_id=self._session_id):
            logger.info(f"SESSION: started for {user.username}")
            await self._controller.load_root_messages()

    def logout(self) -> None:
        if self._controller is not None:
            self._controller.close()
        if self._user is not None:
            with logger.contextualize(session_id=self._session_id):
                logger.info(f"SESSION: {self._user.username} logged out")
        self._user = None
        self._controller = None
        self._session_id = None

    async def refresh(self) -> bool:
        """Refetch the root listing, discarding the current tree."""
        controller = self.controller
        with logger.contextualize(session_id=self._session_id):
            return await controller.load_root_messages()

    async def toggle_replies(self, node_id: MessageId) -> bool:
        controller = self.controller
        with logger.contextualize(session_id=self._session_id):
            return await controller.toggle_replies(node_id)

    async def post_message(self, draft: ComposeDraft) -> Message | None:
        """
        Post a root message from a draft.

        Raises:
            ContentValidationError: draft length out of range (nothing sent).
        """
        controller = self.controller
        validate_content(draft.content)
        with logger.contextualize(session_id=self._session_id):
            message = await controller.submit_message(draft.content)
        if message is not None:
            draft.clear()
        return message

    async def post_reply(
        self, parent_id: MessageId, draft: ComposeDraft
    ) -> Message | None:
        """Post a reply from a draft; the draft keeps its text on failure."""
        controller = self.controller
        validate_content(draft.content)
        with logger.contextualize(session_id=self._session_id):
            message = await controller.submit_reply(parent_id, draft.content)
        if message is not None:
            draft.clear()
        return message

    async def close(self) -> None:
        self.logout()
        await self._service.aclose()
