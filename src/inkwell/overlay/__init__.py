"""Annotation overlay rendering."""

from inkwell.overlay.html import segments_to_html
from inkwell.overlay.segments import (
    ANNOTATION_KINDS,
    DRAFT_ANNOTATION_ID,
    Annotation,
    AnnotationKind,
    HighlightSegment,
    PlainSegment,
    Segment,
    is_valid_span,
    normalise_kind,
    render_segments,
)

__all__ = [
    "ANNOTATION_KINDS",
    "DRAFT_ANNOTATION_ID",
    "Annotation",
    "AnnotationKind",
    "HighlightSegment",
    "PlainSegment",
    "Segment",
    "is_valid_span",
    "normalise_kind",
    "render_segments",
    "segments_to_html",
]
