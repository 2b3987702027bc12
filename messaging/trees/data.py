"""Tree node data structures for the reply cache."""

from dataclasses import dataclass, field
from enum import StrEnum

from ..models import Message, MessageId


class ReplyLoadState(StrEnum):
    """Reply-loading state of a tree node."""

    UNLOADED = "unloaded"  # children unknown, no fetch issued
    LOADING = "loading"  # fetch in flight
    LOADED = "loaded"  # children resident (possibly empty)


@dataclass
class TreeNode:
    """
    Cache state for one message.

    Children are stored as ids; the owning cache resolves them to nodes.
    ``children_ids is None`` means the replies have not been loaded yet.
    """

    message: Message
    children_ids: list[MessageId] | None = None
    expanded: bool = False
    pending_fetch: bool = False

    @property
    def node_id(self) -> MessageId:
        return self.message.id

    @property
    def is_loaded(self) -> bool:
        return self.children_ids is not None

    @property
    def load_state(self) -> ReplyLoadState:
        if self.children_ids is not None:
            return ReplyLoadState.LOADED
        if self.pending_fetch:
            return ReplyLoadState.LOADING
        return ReplyLoadState.UNLOADED

    @property
    def reply_count(self) -> int:
        """Resident reply count once loaded, else the service's hint, else 0."""
        if self.children_ids is not None:
            return len(self.children_ids)
        return self.message.reply_count or 0

    def to_dict(self) -> dict:
        """Debug-friendly snapshot (ids and flags, no payload text)."""
        return {
            "node_id": self.node_id,
            "parent_id": self.message.parent_id,
            "children_ids": list(self.children_ids)
            if self.children_ids is not None
            else None,
            "expanded": self.expanded,
            "pending_fetch": self.pending_fetch,
            "state": self.load_state.value,
        }


@dataclass
class RootListing:
    """Ordered top-level message ids, replaced wholesale on refresh."""

    ids: list[MessageId] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.ids)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.ids
