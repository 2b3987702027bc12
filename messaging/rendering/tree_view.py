"""Read-only views of the reply tree for presentation code.

The walk is iterative over the cache's id index, so arbitrarily deep
threads never hit the recursion limit, and views never hold live nodes.
"""

from dataclasses import dataclass
from datetime import datetime

from ..models import MessageId
from ..trees.data import ReplyLoadState
from ..trees.repository import MessageTreeCache

# Deeper replies are drawn at this indentation level
MAX_INDENT_LEVEL = 4
INDENT = "    "


@dataclass(frozen=True)
class NodeView:
    """One visible row of the board."""

    node_id: MessageId
    author: str
    content: str
    created_at: datetime
    depth: int
    reply_count: int
    expanded: bool
    state: ReplyLoadState

    @property
    def is_loading(self) -> bool:
        return self.state is ReplyLoadState.LOADING


def walk_visible(cache: MessageTreeCache) -> list[NodeView]:
    """
    Depth-first rows for every visible node.

    Roots are always visible; children show only under an expanded,
    loaded parent.
    """
    rows: list[NodeView] = []
    seen: set[MessageId] = set()
    stack: list[tuple[MessageId, int]] = [
        (node.node_id, 0) for node in reversed(cache.get_root())
    ]

    while stack:
        node_id, depth = stack.pop()
        node = cache.get_node(node_id)
        # A node listed under two parents is drawn once
        if node is None or node_id in seen:
            continue
        seen.add(node_id)

        rows.append(
            NodeView(
                node_id=node_id,
                author=node.message.author,
                content=node.message.content,
                created_at=node.message.created_at,
                depth=depth,
                reply_count=node.reply_count,
                expanded=node.expanded,
                state=node.load_state,
            )
        )

        if node.expanded and node.children_ids:
            for child_id in reversed(node.children_ids):
                stack.append((child_id, depth + 1))

    return rows


def format_row(view: NodeView) -> str:
    indent = INDENT * min(view.depth, MAX_INDENT_LEVEL)
    marker = "v" if view.expanded else ">"
    when = view.created_at.strftime("%Y-%m-%d %H:%M")
    line = f"{indent}{marker} {view.author} ({when}): {view.content} [{view.reply_count}]"
    if view.is_loading:
        line += " (loading replies...)"
    return line


def render_text(cache: MessageTreeCache) -> str:
    """Plain-text outline of the visible board."""
    rows = walk_visible(cache)
    if not rows:
        return "No messages yet. Be the first to post!"
    return "\n".join(format_row(view) for view in rows)
