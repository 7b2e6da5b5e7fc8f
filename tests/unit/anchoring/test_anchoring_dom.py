"""Tests for the anchoring tree: geometry, containment and build_dom()."""

from __future__ import annotations

import pytest

from inkwell.anchoring import Element, Rect, TextNode, build_dom, common_ancestor
from inkwell.anchoring.dom import Node


class TestRect:
    """Rectangle arithmetic used for toolbar placement."""

    def test_relative_to(self) -> None:
        """Translation subtracts the origin's top-left corner only."""
        rect = Rect(top=120, left=340, width=50, height=18)
        origin = Rect(top=100, left=300, width=900, height=900)
        assert rect.relative_to(origin) == Rect(top=20, left=40, width=50, height=18)

    def test_union(self) -> None:
        """Union covers both rectangles."""
        a = Rect(top=10, left=10, width=20, height=10)
        b = Rect(top=30, left=0, width=10, height=10)
        assert a.union(b) == Rect(top=10, left=0, width=30, height=30)

    def test_union_ignores_empty(self) -> None:
        """Empty rectangles do not drag the union to the origin."""
        a = Rect(top=10, left=10, width=20, height=10)
        assert a.union(Rect()) == a
        assert Rect().union(a) == a


class TestTree:
    """Containment and ancestry."""

    def test_contains_self_and_descendants(self) -> None:
        """contains() is inclusive, like DOM Node.contains."""
        text = TextNode("x")
        inner = Element("span", [text])
        outer = Element("div", [inner])
        assert outer.contains(outer)
        assert outer.contains(text)
        assert not inner.contains(outer)
        assert not outer.contains(None)

    def test_common_ancestor(self) -> None:
        """Deepest shared ancestor of two nodes."""
        a, b = TextNode("a"), TextNode("b")
        left = Element("p", [a])
        body = Element("body", [left, Element("p", [b])])
        assert common_ancestor(a, b) is body
        assert common_ancestor(a, a) is a
        assert common_ancestor(a, left) is left

    def test_common_ancestor_of_disconnected_nodes(self) -> None:
        """Nodes in separate trees share no ancestor."""
        assert common_ancestor(TextNode("a"), TextNode("b")) is None

    def test_element_rect_defaults_to_text_union(self) -> None:
        """An element without its own rect spans its text nodes."""
        element = Element(
            "p",
            [
                TextNode("ab", rect=Rect(top=0, left=0, width=20, height=10)),
                TextNode("cd", rect=Rect(top=10, left=0, width=20, height=10)),
            ],
        )
        assert element.get_bounding_client_rect() == Rect(0, 0, 20, 20)

    def test_find_by_attribute(self) -> None:
        """find() returns the first descendant carrying the attribute."""
        target = Element("span", attributes={"data-annotation-id": "c2"})
        root = Element(
            "div",
            [Element("span", attributes={"data-annotation-id": "c1"}), target],
        )
        assert root.find("data-annotation-id", "c2") is target
        assert root.find("data-missing") is None

    def test_node_base_is_abstract(self) -> None:
        """Only text nodes and elements can be instantiated."""
        with pytest.raises(TypeError):
            Node()  # type: ignore[abstract]

    def test_iter_nodes_pre_order(self) -> None:
        """Elements precede their children; siblings follow in order."""
        a, b = TextNode("a"), TextNode("b")
        inner = Element("b", [b])
        root = Element("p", [a, inner])
        assert list(root.iter_nodes()) == [root, a, inner, b]


class TestBuildDom:
    """Building the tree from rendered HTML."""

    def test_text_in_document_order(self) -> None:
        """Tree text is every text node in pre-order, markup dropped."""
        root = build_dom("<p>One <b>two</b></p><p>three<br>four</p>")
        assert root.text_content() == "One twothree\nfour"

    def test_br_becomes_newline_node(self) -> None:
        """<br> contributes a single newline text node."""
        root = build_dom("a<br>b")
        assert [n.data for n in root.iter_text_nodes()] == ["a", "\n", "b"]

    def test_script_and_comments_skipped(self) -> None:
        """Non-rendered content never reaches the tree."""
        root = build_dom("<p>keep</p><!-- note --><script>var x = 1;</script>")
        assert root.text_content() == "keep"

    def test_attributes_preserved(self) -> None:
        """Attributes are copied onto elements."""
        root = build_dom('<span class="annotation" data-annotation-id="c1">x</span>')
        span = root.find("data-annotation-id", "c1")
        assert span is not None
        assert span.tag == "span"
        assert span.attributes["class"] == "annotation"

    def test_whitespace_verbatim(self) -> None:
        """Manuscripts render pre-wrap, so whitespace is not collapsed."""
        root = build_dom("<div>a   b\n c</div>")
        assert root.text_content() == "a   b\n c"

    def test_empty_html(self) -> None:
        """Empty input gives an empty root."""
        assert build_dom("").text_content() == ""
