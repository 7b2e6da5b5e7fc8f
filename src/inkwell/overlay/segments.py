"""Annotation overlay: partition manuscript text into plain and highlight runs.

Architecture:
    Annotations arrive in arbitrary order (local saves, realtime pushes) and
    may overlap. ``render_segments`` drops invalid spans, merges the
    in-progress draft, sorts by ``(start, end)`` and sweeps a cursor across
    the text. An annotation starting before the cursor overlaps something
    already emitted and is left out of the overlay; it stays reachable
    through the sidebar.

The output always concatenates back to the input text and never contains
two segments covering the same offset.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

AnnotationKind = Literal["highlight", "strikethrough"]
ANNOTATION_KINDS: tuple[AnnotationKind, ...] = ("highlight", "strikethrough")

# Reserved id of the single unsaved annotation
DRAFT_ANNOTATION_ID = "__draft__"

# Presentation classes, highest priority first
CLASS_DRAFT = "annotation-draft"
CLASS_SELECTED = "annotation-selected"
CLASS_RESOLVED = "annotation-resolved"
CLASS_DEFAULT = "annotation"
CLASS_STRIKETHROUGH = "annotation--strikethrough"


def normalise_kind(kind: str | None) -> AnnotationKind:
    """Map a stored kind onto a known one; unknown kinds render as highlights."""
    if kind == "strikethrough":
        return "strikethrough"
    return "highlight"


@dataclass(frozen=True)
class Annotation:
    """A comment's anchored span plus display metadata.

    ``text`` is cached when the annotation is made and may go stale if the
    manuscript is edited later; rendering always slices the current content.
    """

    id: str
    start: int
    end: int
    kind: AnnotationKind = "highlight"
    text: str = ""
    is_draft: bool = False
    is_resolved: bool = False


@dataclass(frozen=True)
class PlainSegment:
    text: str
    start: int
    end: int


@dataclass(frozen=True)
class HighlightSegment:
    """A highlighted run tagged with the annotation it came from."""

    text: str
    start: int
    end: int
    annotation_id: str
    kind: AnnotationKind = "highlight"
    is_draft: bool = False
    is_resolved: bool = False
    is_selected: bool = False

    @property
    def clickable(self) -> bool:
        """Drafts have no persisted id, so clicking them does nothing."""
        return not self.is_draft

    @property
    def css_class(self) -> str:
        if self.is_draft:
            base = CLASS_DRAFT
        elif self.is_selected:
            base = CLASS_SELECTED
        elif self.is_resolved:
            base = CLASS_RESOLVED
        else:
            base = CLASS_DEFAULT
        if self.kind == "strikethrough":
            return f"{base} {CLASS_STRIKETHROUGH}"
        return base


Segment = PlainSegment | HighlightSegment


def is_valid_span(annotation: Annotation, content_length: int) -> bool:
    """True when ``0 <= start < end <= content_length``."""
    return 0 <= annotation.start < annotation.end <= content_length


def render_segments(
    content: str,
    annotations: Iterable[Annotation],
    active_id: str | None = None,
    draft_annotation: Annotation | None = None,
) -> list[Segment]:
    """Partition *content* into ordered plain and highlighted segments.

    Args:
        content: The manuscript text for this render.
        annotations: Saved annotations, duplicate-free, in any order. Never
            mutated.
        active_id: Id of the focused annotation, rendered as selected.
        draft_annotation: The in-progress selection, if any. It is rendered
            as a draft whatever its ``is_draft`` flag says.

    Returns:
        Segments whose texts concatenate to *content*. Overlap is resolved
        earliest start first, then shortest span; later overlapping spans
        are omitted.
    """
    length = len(content)
    working: list[Annotation] = []
    for annotation in annotations:
        if is_valid_span(annotation, length):
            working.append(annotation)
        else:
            logger.debug(
                "Skipping annotation %s with invalid span %d-%d (length %d)",
                annotation.id,
                annotation.start,
                annotation.end,
                length,
            )

    draft_key: int | None = None
    if draft_annotation is not None:
        if is_valid_span(draft_annotation, length):
            working.append(draft_annotation)
            draft_key = id(draft_annotation)
        else:
            logger.debug(
                "Skipping draft with invalid span %d-%d",
                draft_annotation.start,
                draft_annotation.end,
            )

    # Stable sort: only (start, end) decides the order
    working.sort(key=lambda a: (a.start, a.end))

    segments: list[Segment] = []
    cursor = 0
    for annotation in working:
        if annotation.start < cursor:
            logger.debug(
                "Annotation %s (%d-%d) overlaps cursor %d, omitted from overlay",
                annotation.id,
                annotation.start,
                annotation.end,
                cursor,
            )
            continue
        if annotation.start > cursor:
            segments.append(
                PlainSegment(
                    text=content[cursor : annotation.start],
                    start=cursor,
                    end=annotation.start,
                )
            )
        is_draft = id(annotation) == draft_key
        segments.append(
            HighlightSegment(
                text=content[annotation.start : annotation.end],
                start=annotation.start,
                end=annotation.end,
                annotation_id=DRAFT_ANNOTATION_ID if is_draft else annotation.id,
                kind=normalise_kind(annotation.kind),
                is_draft=is_draft,
                is_resolved=annotation.is_resolved,
                is_selected=(
                    not is_draft
                    and active_id is not None
                    and annotation.id == active_id
                ),
            )
        )
        cursor = annotation.end

    if cursor < length:
        segments.append(PlainSegment(text=content[cursor:], start=cursor, end=length))
    return segments
