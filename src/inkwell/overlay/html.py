"""Serialise overlay segments to HTML for the manuscript container.

The container is styled ``white-space: pre-wrap`` so newlines in the text
render as line breaks without markup. Keeping text nodes verbatim means the
browser's character count over the rendered container matches manuscript
offsets exactly.
"""

from __future__ import annotations

import html
from typing import TYPE_CHECKING

from inkwell.overlay.segments import HighlightSegment

if TYPE_CHECKING:
    from collections.abc import Iterable

    from inkwell.overlay.segments import Segment

ANNOTATION_ID_ATTR = "data-annotation-id"


def _span_for(segment: HighlightSegment) -> str:
    attrs = [
        f'class="{segment.css_class}"',
        f'data-start="{segment.start}"',
        f'data-end="{segment.end}"',
    ]
    if segment.clickable:
        attrs.append(f'{ANNOTATION_ID_ATTR}="{html.escape(segment.annotation_id)}"')
    else:
        attrs.append('data-draft="true"')
    return f"<span {' '.join(attrs)}>{html.escape(segment.text, quote=False)}</span>"


def segments_to_html(segments: Iterable[Segment]) -> str:
    """Render segments as escaped HTML.

    Plain runs become bare text. Highlight runs become ``<span>`` elements
    carrying their presentation class; only clickable ones carry
    ``data-annotation-id`` for the click handler to report.
    """
    parts: list[str] = []
    for segment in segments:
        if isinstance(segment, HighlightSegment):
            parts.append(_span_for(segment))
        else:
            parts.append(html.escape(segment.text, quote=False))
    return "".join(parts)
