"""Minimal DOM-like tree used to anchor selections.

The browser reports a selection as two boundary points (container node plus
offset). To turn those into manuscript offsets we need the same node
structure the reader saw: elements, text nodes in pre-order, and the
geometry used to place the floating toolbar. ``build_dom`` builds that tree
from rendered HTML. Manuscripts render ``pre-wrap``, so text nodes keep
their characters verbatim and counts agree with the stored content.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from selectolax.lexbor import LexborHTMLParser

from inkwell.input_pipeline.html_input import STRIP_TAGS

if TYPE_CHECKING:
    from collections.abc import Iterator


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in CSS pixels."""

    top: float = 0.0
    left: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 and self.height <= 0

    def relative_to(self, origin: Rect) -> Rect:
        """Translate into coordinates relative to *origin*'s top-left corner."""
        return Rect(
            top=self.top - origin.top,
            left=self.left - origin.left,
            width=self.width,
            height=self.height,
        )

    def union(self, other: Rect) -> Rect:
        """Smallest rectangle covering both rectangles (empty ones ignored)."""
        if other.is_empty:
            return self
        if self.is_empty:
            return other
        top = min(self.top, other.top)
        left = min(self.left, other.left)
        return Rect(
            top=top,
            left=left,
            width=max(self.right, other.right) - left,
            height=max(self.bottom, other.bottom) - top,
        )


class Node(ABC):
    """Base class for tree nodes."""

    def __init__(self) -> None:
        self.parent: Element | None = None

    def ancestors(self) -> Iterator[Node]:
        """Yield this node, then each ancestor up to the root."""
        node: Node | None = self
        while node is not None:
            yield node
            node = node.parent

    def contains(self, other: Node | None) -> bool:
        """DOM ``Node.contains``: true for the node itself and descendants."""
        if other is None:
            return False
        return any(node is self for node in other.ancestors())

    def root(self) -> Node:
        node: Node = self
        while node.parent is not None:
            node = node.parent
        return node

    @abstractmethod
    def text_content(self) -> str: ...

    @abstractmethod
    def get_bounding_client_rect(self) -> Rect: ...


class TextNode(Node):
    """A run of text. Offsets into a text node count characters."""

    def __init__(self, data: str, rect: Rect | None = None) -> None:
        super().__init__()
        self.data = data
        self.rect = rect

    def __len__(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return f"TextNode({self.data!r})"

    def text_content(self) -> str:
        return self.data

    def get_bounding_client_rect(self) -> Rect:
        return self.rect or Rect()


class Element(Node):
    """An element. Offsets into an element count child nodes."""

    def __init__(
        self,
        tag: str,
        children: list[Node] | None = None,
        *,
        attributes: dict[str, str] | None = None,
        rect: Rect | None = None,
    ) -> None:
        super().__init__()
        self.tag = tag
        self.attributes = dict(attributes or {})
        self.rect = rect
        self.children: list[Node] = []
        for child in children or ():
            self.append(child)

    def __repr__(self) -> str:
        return f"Element({self.tag!r}, children={len(self.children)})"

    def append(self, child: Node) -> Node:
        child.parent = self
        self.children.append(child)
        return child

    def iter_nodes(self) -> Iterator[Node]:
        """Yield this element, then every descendant node in pre-order."""
        yield self
        for child in self.children:
            if isinstance(child, Element):
                yield from child.iter_nodes()
            else:
                yield child

    def iter_text_nodes(self) -> Iterator[TextNode]:
        """Yield descendant text nodes in document (pre-)order."""
        for node in self.iter_nodes():
            if isinstance(node, TextNode):
                yield node

    def text_content(self) -> str:
        return "".join(node.data for node in self.iter_text_nodes())

    def get_bounding_client_rect(self) -> Rect:
        """Own rect if laid out, else the union of descendant text rects."""
        if self.rect is not None:
            return self.rect
        rect = Rect()
        for node in self.iter_text_nodes():
            rect = rect.union(node.get_bounding_client_rect())
        return rect

    def find(self, attribute: str, value: str | None = None) -> Element | None:
        """Return the first descendant element carrying *attribute*.

        With *value*, the attribute must also equal it.
        """
        for child in self.children:
            if not isinstance(child, Element):
                continue
            if attribute in child.attributes and (
                value is None or child.attributes[attribute] == value
            ):
                return child
            found = child.find(attribute, value)
            if found is not None:
                return found
        return None


def common_ancestor(first: Node, second: Node) -> Node | None:
    """Deepest node containing both *first* and *second*."""
    seen = {id(node) for node in first.ancestors()}
    for node in second.ancestors():
        if id(node) in seen:
            return node
    return None


def build_dom(html: str) -> Element:
    """Build a tree from rendered HTML.

    Text nodes keep their characters verbatim, ``<br>`` becomes a ``"\\n"``
    text node and script, style and comment nodes are dropped.

    Returns:
        An element standing in for ``<body>``.
    """
    root = Element("body")
    if not html:
        return root

    tree = LexborHTMLParser(html)
    source = tree.body if tree.body else tree.root
    if source is None:
        return root

    def _walk(node: Any, parent: Element) -> None:
        tag = node.tag
        if tag == "-text":
            text = node.text_content
            if text:
                parent.append(TextNode(text))
            return
        if not tag or not tag[0].isalpha() or tag in STRIP_TAGS:
            # comments and other non-element nodes
            return
        if tag == "br":
            parent.append(TextNode("\n"))
            return

        element = Element(tag, attributes=_attributes_of(node))
        parent.append(element)
        child = node.child
        while child is not None:
            _walk(child, element)
            child = child.next

    child = source.child
    while child is not None:
        _walk(child, root)
        child = child.next
    return root


def _attributes_of(node: Any) -> dict[str, str]:
    return {key: value or "" for key, value in node.attributes.items()}
