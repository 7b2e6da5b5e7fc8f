"""Selection anchoring: live text selection -> stable character offsets.

A saved annotation wraps its text in highlight markup, which changes the
node structure on the next render. Character offsets into the manuscript
are the only span representation that survives re-rendering, so every
selection is converted to ``(start, end)`` at the moment it is made.

Two entry points share the same guards:

* ``compute_selection_anchor`` works on a :class:`SelectionRange` over the
  tree from :mod:`inkwell.anchoring.dom`.
* ``anchor_from_event`` validates the payload the browser's ``mouseup``
  handler emits after doing the same arithmetic client-side.

Invalid selections give ``None``. The caller hides the toolbar; nothing is
raised or surfaced to the user.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from inkwell.anchoring.dom import Element, Rect, TextNode, common_ancestor

if TYPE_CHECKING:
    from collections.abc import Mapping

    from inkwell.anchoring.dom import Node

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionAnchor:
    """A validated selection, ready to become a draft annotation.

    Attributes:
        text: Selected text with surrounding whitespace trimmed (display and
            the cached annotation text).
        start: Offset of the first selected character in the manuscript.
        end: Exclusive end offset; ``end - start`` is the raw selection length.
        rect: Selection bounds relative to the root element.
    """

    text: str
    start: int
    end: int
    rect: Rect


@dataclass
class SelectionRange:
    """A DOM Range: two boundary points plus optional laid-out geometry.

    Boundary offsets count characters in a text node and child nodes in an
    element, as in the browser.
    """

    start_container: Node
    start_offset: int
    end_container: Node
    end_offset: int
    client_rect: Rect | None = None

    @property
    def common_ancestor_container(self) -> Node | None:
        return common_ancestor(self.start_container, self.end_container)

    def to_string(self) -> str:
        """Raw text between the boundary points (``Range.toString()``)."""
        document = self.start_container.root()
        if document is not self.end_container.root():
            return ""
        start = boundary_offset(document, self.start_container, self.start_offset)
        end = boundary_offset(document, self.end_container, self.end_offset)
        if start is None or end is None or end <= start:
            return ""
        return document.text_content()[start:end]

    def get_bounding_client_rect(self) -> Rect:
        """Explicit geometry when known, else the union of touched text rects."""
        if self.client_rect is not None:
            return self.client_rect
        document = self.start_container.root()
        if not isinstance(document, Element):
            return self.start_container.get_bounding_client_rect()
        start = boundary_offset(document, self.start_container, self.start_offset)
        end = boundary_offset(document, self.end_container, self.end_offset)
        if start is None or end is None:
            return Rect()
        rect = Rect()
        position = 0
        for node in document.iter_text_nodes():
            node_end = position + len(node)
            if position < end and start < node_end:
                rect = rect.union(node.get_bounding_client_rect())
            position = node_end
        return rect


def boundary_offset(root: Node, container: Node, offset: int) -> int | None:
    """Count the characters in *root* that precede a boundary point.

    This is the length of a range from the start of *root* to
    ``(container, offset)``, walking text nodes in pre-order.

    Returns:
        The character count, or ``None`` when *container* is outside *root*.
    """
    if not root.contains(container):
        return None
    if isinstance(root, TextNode):
        return _clamp(offset, len(root))

    assert isinstance(root, Element)
    count = 0
    if isinstance(container, TextNode):
        for node in root.iter_text_nodes():
            if node is container:
                return count + _clamp(offset, len(node))
            count += len(node)
        return None

    assert isinstance(container, Element)
    # Text before the container in pre-order, then its first *offset* children
    for node in root.iter_nodes():
        if node is container:
            return count + sum(
                len(child.text_content())
                for child in container.children[: max(offset, 0)]
            )
        if isinstance(node, TextNode):
            count += len(node)
    return None


def _clamp(value: int, upper: int) -> int:
    return min(max(value, 0), upper)


def _validated_offsets(
    raw_text: str, start: int, content_length: int
) -> tuple[int, int] | None:
    """Apply the anchor guards shared by both entry points.

    ``end`` is derived from the raw (untrimmed) length so that
    ``content[start:end]`` is exactly the selected substring.
    """
    if not raw_text.strip():
        return None
    end = start + len(raw_text)
    if start < 0 or end <= start or end > content_length:
        logger.debug(
            "Rejecting selection start=%d end=%d content_length=%d",
            start,
            end,
            content_length,
        )
        return None
    return start, end


def compute_selection_anchor(
    selection_range: SelectionRange | None,
    root_element: Element | None,
    full_content: str,
) -> SelectionAnchor | None:
    """Translate a live selection into a manuscript anchor.

    Args:
        selection_range: The current selection's first range, if any.
        root_element: Container whose text defines the offset space.
        full_content: The manuscript text, for bounds validation.

    Returns:
        The anchor, or ``None`` when there is no usable selection: no range,
        a range outside *root_element*, whitespace-only text, or offsets
        outside ``full_content``.
    """
    if selection_range is None or root_element is None:
        return None
    if not root_element.contains(selection_range.common_ancestor_container):
        logger.debug("Selection outside manuscript root")
        return None

    raw_text = selection_range.to_string()
    start = boundary_offset(
        root_element,
        selection_range.start_container,
        selection_range.start_offset,
    )
    if start is None:
        return None
    offsets = _validated_offsets(raw_text, start, len(full_content))
    if offsets is None:
        return None

    rect = selection_range.get_bounding_client_rect().relative_to(
        root_element.get_bounding_client_rect()
    )
    return SelectionAnchor(
        text=raw_text.strip(), start=offsets[0], end=offsets[1], rect=rect
    )


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _rect_from_payload(value: Any) -> Rect | None:
    if not isinstance(value, dict):
        return None
    coords: dict[str, float] = {}
    for key in ("top", "left", "width", "height"):
        number = value.get(key, 0)
        if isinstance(number, bool) or not isinstance(number, (int, float)):
            return None
        coords[key] = float(number)
    return Rect(**coords)


def anchor_from_event(
    args: Mapping[str, Any], full_content: str
) -> SelectionAnchor | None:
    """Validate a selection payload emitted by the browser.

    Expected keys:
        text (str): Raw ``range.toString()`` of the selection.
        start (int): Characters between the root's start and the range start.
        rect (dict): Selection ``getBoundingClientRect()``.
        root_rect (dict): Root element ``getBoundingClientRect()``.

    Any ``end`` sent by the client is ignored and recomputed from the raw
    text length. Malformed payloads give ``None``.
    """
    raw_text = args.get("text")
    start = args.get("start")
    if not isinstance(raw_text, str) or not _is_int(start):
        return None

    offsets = _validated_offsets(raw_text, start, len(full_content))
    if offsets is None:
        return None

    rect = _rect_from_payload(args.get("rect")) or Rect()
    root_rect = _rect_from_payload(args.get("root_rect")) or Rect()
    return SelectionAnchor(
        text=raw_text.strip(),
        start=offsets[0],
        end=offsets[1],
        rect=rect.relative_to(root_rect),
    )
