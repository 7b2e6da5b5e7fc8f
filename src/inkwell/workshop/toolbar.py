"""Floating selection toolbar placement and manuscript word counts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from inkwell.anchoring.dom import Rect

TOOLBAR_WIDTH = 220
TOOLBAR_HEIGHT = 44
TOOLBAR_MARGIN = 10


@dataclass(frozen=True)
class ToolbarPosition:
    top: float
    left: float


def toolbar_position(
    rect: Rect,
    *,
    width: int = TOOLBAR_WIDTH,
    height: int = TOOLBAR_HEIGHT,
    margin: int = TOOLBAR_MARGIN,
) -> ToolbarPosition:
    """Centre the toolbar horizontally above the selection rect.

    *rect* is relative to the manuscript container, as produced by the
    anchor. The result may be negative near the top or left edge; the page
    lets it overflow rather than clamping.
    """
    return ToolbarPosition(
        top=rect.top - height - margin,
        left=rect.left + rect.width / 2 - width / 2,
    )


def word_count(text: str) -> int:
    return len(text.split())


def truncate(text: str, max_length: int) -> str:
    """Shorten quoted selection text for display, adding an ellipsis."""
    if len(text) <= max_length:
        return text
    return text[:max_length].rstrip() + "..."
