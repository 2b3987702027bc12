"""Presentation helpers for the reply tree."""

from .tree_view import NodeView, format_row, render_text, walk_visible

__all__ = ["NodeView", "format_row", "render_text", "walk_visible"]
