"""Tree controller: turns user intents into service calls and cache updates.

All side effects on the reply tree enter through load_root_messages,
toggle_replies, submit_reply and submit_message. Service failures are
recovered here; the cache never sees partial results.
"""

import asyncio
from collections.abc import Awaitable, Callable

from loguru import logger

from providers.base import MessageService
from providers.exceptions import MessageNotFoundError, MessageServiceError

from ..models import Message, MessageId
from .data import TreeNode
from .repository import MessageTreeCache

ChangeCallback = Callable[[MessageId | None], Awaitable[None]]
ErrorCallback = Callable[[str], Awaitable[None]]


class TreeController:
    """
    Orchestrates reply loading and reply creation on top of a MessageTreeCache.

    Runs on a single event loop; service calls are the only suspension
    points. The controller keeps no node state of its own: it reads
    everything back from the cache after each await.

    Callbacks:
        change_callback(node_id): after a mutation; None means the whole
            root listing changed.
        error_callback(text): human-readable failure for the user.
    """

    def __init__(
        self,
        cache: MessageTreeCache,
        service: MessageService,
        change_callback: ChangeCallback | None = None,
        error_callback: ErrorCallback | None = None,
    ):
        self._cache = cache
        self._service = service
        self._change_callback = change_callback
        self._error_callback = error_callback
        self.last_error: str | None = None
        self._closed = False

        logger.info("TreeController initialized")

    @property
    def cache(self) -> MessageTreeCache:
        return self._cache

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """
        Detach from the session. Completions of calls still in flight are
        dropped: no cache writes, no callbacks.
        """
        self._closed = True
        self._change_callback = None
        self._error_callback = None
        logger.info("TreeController closed")

    def set_change_callback(self, change_callback: ChangeCallback | None) -> None:
        self._change_callback = change_callback

    def set_error_callback(self, error_callback: ErrorCallback | None) -> None:
        self._error_callback = error_callback

    # ------------------------------------------------------------------
    # Read accessors for the presentation layer
    # ------------------------------------------------------------------

    def get_root(self) -> list[TreeNode]:
        return self._cache.get_root()

    def get_children(self, node_id: MessageId) -> list[TreeNode]:
        return self._cache.get_children(node_id)

    def derived_reply_count(self, node_id: MessageId) -> int:
        return self._cache.derived_reply_count(node_id)

    def has_children(self, node_id: MessageId) -> bool:
        return self._cache.has_children(node_id)

    def is_expanded(self, node_id: MessageId) -> bool:
        return self._cache.is_expanded(node_id)

    def is_loading(self, node_id: MessageId) -> bool:
        return self._cache.is_pending_fetch(node_id)

    # ------------------------------------------------------------------
    # Intents
    # ------------------------------------------------------------------

    async def load_root_messages(self) -> bool:
        """
        Replace the root listing with a fresh fetch.

        Returns:
            True on success. On failure the previous tree is left untouched.
        """
        try:
            messages = await self._service.list_messages()
        except MessageServiceError as e:
            if self._closed:
                return False
            await self._report(e, "load messages")
            return False

        if self._closed:
            logger.debug("TREE_CONTROLLER: dropping root listing, controller closed")
            return False
        self._cache.replace_root(messages)
        self.last_error = None
        logger.info(f"TREE_CONTROLLER: loaded {len(messages)} root messages")
        await self._notify(None)
        return True

    async def toggle_replies(self, node_id: MessageId) -> bool:
        """
        Show or hide a node's replies, fetching them on first use.

        Returns:
            True if the node's visibility changed, False if the call was
            coalesced into an in-flight fetch, failed, or the node is unknown.
        """
        node = self._cache.get_node(node_id)
        if node is None:
            logger.warning(f"TREE_CONTROLLER: toggle_replies for unknown node {node_id}")
            return False

        with logger.contextualize(node_id=str(node_id)):
            if node.is_loaded:
                self._cache.set_expanded(node_id, not node.expanded)
                logger.debug(f"TREE_CONTROLLER: node {node_id} expanded={node.expanded}")
                await self._notify(node_id)
                return True

            if node.pending_fetch:
                logger.debug(f"TREE_CONTROLLER: fetch for {node_id} already in flight")
                return False

            return await self._load_replies(node_id)

    async def _load_replies(self, node_id: MessageId) -> bool:
        generation = self._cache.generation
        self._cache.set_pending_fetch(node_id, True)
        await self._notify(node_id)

        try:
            replies = await self._service.fetch_replies(node_id)
        except MessageNotFoundError as e:
            if self._is_stale(node_id, generation):
                logger.debug(f"TREE_CONTROLLER: ignoring stale not-found for {node_id}")
                return False
            # Parent vanished remotely: show it as an empty subtree, stop retrying
            self._cache.set_children(node_id, [])
            self._cache.set_expanded(node_id, True)
            await self._report(e, "load replies")
            await self._notify(node_id)
            return False
        except MessageServiceError as e:
            if self._is_stale(node_id, generation):
                logger.debug(f"TREE_CONTROLLER: ignoring stale failure for {node_id}")
                return False
            self._cache.set_pending_fetch(node_id, False)
            await self._report(e, "load replies")
            await self._notify(node_id)
            return False
        except asyncio.CancelledError:
            if not self._is_stale(node_id, generation):
                self._cache.set_pending_fetch(node_id, False)
            raise

        if self._is_stale(node_id, generation):
            logger.info(
                f"TREE_CONTROLLER: dropping {len(replies)} replies for {node_id}, "
                "tree was reset while fetching"
            )
            return False

        self._cache.set_children(node_id, replies)
        self._cache.set_expanded(node_id, True)
        self.last_error = None
        logger.info(f"TREE_CONTROLLER: loaded {len(replies)} replies for {node_id}")
        await self._notify(node_id)
        return True

    async def submit_reply(self, parent_id: MessageId, content: str) -> Message | None:
        """
        Create a reply and show it under its parent.

        Returns:
            The created message, or None if the service call failed (the cache
            is not touched in that case).
        """
        with logger.contextualize(node_id=str(parent_id)):
            try:
                message = await self._service.create_message(
                    content, parent_id=parent_id
                )
            except MessageServiceError as e:
                if self._closed:
                    return None
                await self._report(e, "post reply")
                return None

            self.last_error = None
            if self._closed:
                logger.debug(
                    f"TREE_CONTROLLER: reply {message.id} created after close, not cached"
                )
                return message
            if not self._cache.has_node(parent_id):
                logger.info(
                    f"TREE_CONTROLLER: reply {message.id} created but parent "
                    f"{parent_id} is no longer resident"
                )
                return message

            self._cache.append_child(parent_id, message)
            self._cache.set_expanded(parent_id, True)
            logger.info(f"TREE_CONTROLLER: reply {message.id} added under {parent_id}")
            await self._notify(parent_id)
            return message

    async def submit_message(self, content: str) -> Message | None:
        """
        Post a new root message, then refresh the root listing.

        Root ordering is decided by the service, so the listing is refetched
        instead of patched.
        """
        try:
            message = await self._service.create_message(content)
        except MessageServiceError as e:
            if self._closed:
                return None
            await self._report(e, "post message")
            return None

        logger.info(f"TREE_CONTROLLER: root message {message.id} created")
        if self._closed:
            return message
        await self.load_root_messages()
        return message

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _is_stale(self, node_id: MessageId, generation: int) -> bool:
        if self._closed:
            return True
        return self._cache.generation != generation or not self._cache.has_node(
            node_id
        )

    async def _notify(self, node_id: MessageId | None) -> None:
        if self._change_callback:
            await self._change_callback(node_id)

    async def _report(self, error: MessageServiceError, action: str) -> None:
        self.last_error = error.user_message
        logger.warning(
            f"TREE_CONTROLLER: {action} failed ({error.kind}): {error.message}"
        )
        if self._error_callback:
            await self._error_callback(error.user_message)
