"""Manuscript input pipeline: content detection and HTML-to-text conversion.

A manuscript is stored and annotated as plain text. Pasted HTML is
flattened to text once, on the way in. The rendered page shows the
plain text inside a ``white-space: pre-wrap`` container, so the text nodes
of the rendered page are the same coordinate space as the stored content.
"""

# Pattern: Functional Core (pure functions for content detection and transformation)

from __future__ import annotations

import logging
import re
from typing import Literal

from selectolax.lexbor import LexborHTMLParser

logger = logging.getLogger(__name__)

CONTENT_TYPES = ("html", "text")
ContentType = Literal["html", "text"]

# Tags whose content never reaches the character stream
STRIP_TAGS = frozenset(("script", "style", "noscript", "template"))

# Elements that end a line when flattening pasted HTML to manuscript text
_PARAGRAPH_TAGS = "p, div, h1, h2, h3, h4, h5, h6, li, blockquote"

# Whitespace pattern matching JS /[\s]+/g, includes \u00a0 (nbsp)
WHITESPACE_RUN = re.compile(r"[\s\u00a0]+")

_EXCESS_BLANK_LINES = re.compile(r"\n{3,}")

# Private-use placeholder for line breaks while whitespace is collapsed
_LINE_MARK = "\ue000"


def detect_content_type(content: str | bytes) -> ContentType:
    """Detect whether pasted or uploaded content is HTML or plain text.

    Args:
        content: Raw content (string or bytes).

    Returns:
        ``"html"`` when the content starts with a doctype/html tag or
        contains common block tags, otherwise ``"text"``.
    """
    if isinstance(content, bytes):
        content = _decode_bytes(content)

    stripped = content.lstrip()
    lower = stripped.lower()
    if lower.startswith("<!doctype") or lower.startswith("<html"):
        return "html"
    if re.search(
        r"<(div|p|span|h[1-6]|ul|ol|li|br|body)\b", stripped, re.IGNORECASE
    ):
        return "html"
    return "text"


def _decode_bytes(content: bytes) -> str:
    """Decode bytes to string for content type detection."""
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError:
        # Fall back to latin-1 which accepts all byte values
        return content.decode("latin-1")


def html_to_manuscript(html_content: str) -> str:
    """Flatten pasted HTML to manuscript text.

    ``<br>`` becomes a newline and paragraph-level blocks are separated by a
    blank line. Inline whitespace is collapsed the way a browser would show
    it, since the source formatting is not part of the manuscript.
    """
    if not html_content:
        return ""

    tree = LexborHTMLParser(html_content)
    for tag in STRIP_TAGS:
        for node in tree.css(tag):
            node.decompose()
    for br in tree.css("br"):
        br.replace_with(_LINE_MARK)
    for block in tree.css(_PARAGRAPH_TAGS):
        block.insert_after(_LINE_MARK * 2)

    text = tree.body.text() if tree.body else (tree.text() or "")
    text = WHITESPACE_RUN.sub(" ", text)
    text = text.replace(" " + _LINE_MARK, _LINE_MARK)
    text = text.replace(_LINE_MARK + " ", _LINE_MARK).replace(_LINE_MARK, "\n")
    return _EXCESS_BLANK_LINES.sub("\n\n", text).strip()


def prepare_manuscript(content: str | bytes, source_type: ContentType) -> str:
    """Convert uploaded or pasted content to annotatable manuscript text.

    Args:
        content: Raw input content (string or bytes).
        source_type: Confirmed content type.

    Returns:
        Plain text with normalised newlines. This string is the offset
        coordinate space for every annotation made against the piece.
    """
    if isinstance(content, bytes):
        content = _decode_bytes(content)

    logger.info(
        "[PIPELINE] Input: type=%s, size=%d chars",
        source_type,
        len(content),
    )

    if source_type == "html":
        text = html_to_manuscript(content)
    else:
        text = content.replace("\r\n", "\n").replace("\r", "\n")

    logger.info("[PIPELINE] Manuscript: size=%d chars", len(text))
    return text
