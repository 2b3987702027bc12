"""In-memory cache of the reply tree.

Single owner of every TreeNode and of the root listing. Nodes live in one
id-keyed index; parent/child links are id lists, so presentation code walks
the tree through the cache instead of holding nested objects.
"""

from collections.abc import Iterable, Sequence

from loguru import logger

from ..models import Message, MessageId
from .data import RootListing, TreeNode


class MessageTreeCache:
    """
    Resident message data and per-node UI state.

    All mutation goes through the methods below. Mutating methods silently
    ignore ids the cache does not know, since a fetch may complete after a
    full reset has discarded its target.
    """

    def __init__(self):
        self._nodes: dict[MessageId, TreeNode] = {}
        self._root = RootListing()
        # Bumped on every full reset so late completions can detect staleness
        self._generation = 0

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def generation(self) -> int:
        return self._generation

    def get_node(self, node_id: MessageId) -> TreeNode | None:
        return self._nodes.get(node_id)

    def has_node(self, node_id: MessageId) -> bool:
        return node_id in self._nodes

    def node_count(self) -> int:
        return len(self._nodes)

    def get_root(self) -> list[TreeNode]:
        """Root nodes in service order."""
        return [self._nodes[nid] for nid in self._root.ids]

    def get_children(self, node_id: MessageId) -> list[TreeNode]:
        """Resident children of a node; empty if unknown or not loaded."""
        node = self._nodes.get(node_id)
        if not node or node.children_ids is None:
            return []
        return [self._nodes[cid] for cid in node.children_ids]

    def has_children(self, node_id: MessageId) -> bool:
        """True once replies are resident, even if there are none."""
        node = self._nodes.get(node_id)
        return node.is_loaded if node else False

    def is_expanded(self, node_id: MessageId) -> bool:
        node = self._nodes.get(node_id)
        return node.expanded if node else False

    def is_pending_fetch(self, node_id: MessageId) -> bool:
        node = self._nodes.get(node_id)
        return node.pending_fetch if node else False

    def derived_reply_count(self, node_id: MessageId) -> int:
        node = self._nodes.get(node_id)
        return node.reply_count if node else 0

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def replace_root(self, messages: Sequence[Message]) -> None:
        """
        Discard the whole tree and rebuild the root listing.

        Messages carrying embedded replies are ingested through
        set_children, same as a dedicated fetch.
        """
        self._nodes = {}
        self._root = RootListing()
        self._generation += 1

        embedded: list[Message] = []
        for message in messages:
            if message.id in self._nodes:
                logger.warning(
                    f"TREE_CACHE: duplicate root {message.id} in listing, keeping first"
                )
                continue
            self._nodes[message.id] = TreeNode(message=message)
            self._root.ids.append(message.id)
            if message.replies is not None:
                embedded.append(message)

        for message in embedded:
            self.set_children(message.id, message.replies or [])

        logger.debug(
            f"TREE_CACHE: replace_root roots={len(self._root)} "
            f"nodes={len(self._nodes)} generation={self._generation}"
        )

    def set_children(self, node_id: MessageId, messages: Sequence[Message]) -> None:
        """
        Merge a reply list into a node's children.

        Union by id: fetched order first, then resident children the fetch did
        not return (e.g. a reply appended while the fetch was in flight).
        Nodes that already exist keep their own children and expanded state;
        only the message payload is refreshed. Embedded replies are ingested
        iteratively, so nesting depth is unbounded.
        """
        if node_id not in self._nodes:
            logger.debug(f"TREE_CACHE: set_children ignored, unknown node {node_id}")
            return

        work: list[tuple[MessageId, Sequence[Message]]] = [(node_id, messages)]
        while work:
            parent_id, batch = work.pop()
            for child in self._merge_children(parent_id, batch):
                work.append((child.id, child.replies or []))

    def _merge_children(
        self, parent_id: MessageId, messages: Iterable[Message]
    ) -> list[Message]:
        """Merge one level; returns the children that carried embedded replies."""
        parent = self._nodes[parent_id]
        previous = parent.children_ids or []

        merged: list[MessageId] = []
        seen: set[MessageId] = set()
        with_replies: list[Message] = []
        for message in messages:
            if message.id == parent_id:
                logger.warning(f"TREE_CACHE: node {parent_id} listed as its own reply")
                continue
            if message.id in seen:
                continue
            seen.add(message.id)
            self._upsert(message)
            merged.append(message.id)
            if message.replies is not None:
                with_replies.append(message)

        kept = [cid for cid in previous if cid not in seen]
        if kept:
            logger.debug(
                f"TREE_CACHE: node {parent_id} kept {len(kept)} local replies "
                "missing from fetched list"
            )
        merged.extend(kept)

        parent.children_ids = merged
        parent.pending_fetch = False
        logger.debug(f"TREE_CACHE: set_children node={parent_id} count={len(merged)}")
        return with_replies

    def append_child(self, parent_id: MessageId, message: Message) -> None:
        """
        Append a freshly created reply.

        An unloaded parent becomes loaded, as though an empty fetch had
        already happened, so the reply shows without fetching its siblings.
        """
        parent = self._nodes.get(parent_id)
        if parent is None:
            logger.debug(f"TREE_CACHE: append_child ignored, unknown parent {parent_id}")
            return

        if parent.children_ids is None:
            parent.children_ids = []

        self._upsert(message)
        if message.id in parent.children_ids:
            logger.debug(
                f"TREE_CACHE: reply {message.id} already listed under {parent_id}"
            )
            return
        parent.children_ids.append(message.id)
        logger.debug(f"TREE_CACHE: append_child parent={parent_id} child={message.id}")

    def set_expanded(self, node_id: MessageId, value: bool) -> None:
        node = self._nodes.get(node_id)
        if node:
            node.expanded = value

    def set_pending_fetch(self, node_id: MessageId, value: bool) -> None:
        node = self._nodes.get(node_id)
        if node:
            node.pending_fetch = value

    def _upsert(self, message: Message) -> TreeNode:
        node = self._nodes.get(message.id)
        if node is None:
            node = TreeNode(message=message)
            self._nodes[message.id] = node
        else:
            node.message = message
        return node

    def to_dict(self) -> dict:
        """Snapshot of ids and flags for debugging."""
        return {
            "generation": self._generation,
            "root_ids": list(self._root.ids),
            "nodes": {nid: node.to_dict() for nid, node in self._nodes.items()},
        }
