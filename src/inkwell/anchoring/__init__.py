"""Selection anchoring: map live selections to manuscript character offsets."""

from inkwell.anchoring.dom import Element, Rect, TextNode, build_dom, common_ancestor
from inkwell.anchoring.selection import (
    SelectionAnchor,
    SelectionRange,
    anchor_from_event,
    boundary_offset,
    compute_selection_anchor,
)

__all__ = [
    "Element",
    "Rect",
    "SelectionAnchor",
    "SelectionRange",
    "TextNode",
    "anchor_from_event",
    "boundary_offset",
    "build_dom",
    "common_ancestor",
    "compute_selection_anchor",
]
