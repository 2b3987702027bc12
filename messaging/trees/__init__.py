"""Reply tree cache and controller."""

from .controller import TreeController
from .data import ReplyLoadState, RootListing, TreeNode
from .repository import MessageTreeCache

__all__ = [
    "MessageTreeCache",
    "ReplyLoadState",
    "RootListing",
    "TreeController",
    "TreeNode",
]
