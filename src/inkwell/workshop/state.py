"""Caller-owned workshop state: comments, focus, selection and draft.

The overlay renderer is stateless. Everything it needs per pass (the
annotation set, the active id, the draft) lives here and is mutated only
from UI event handlers, which the event loop already serialises.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from inkwell.models import CommentRecord, PersistRequest, SelectionJson
from inkwell.overlay.segments import (
    DRAFT_ANNOTATION_ID,
    Annotation,
    AnnotationKind,
    normalise_kind,
    render_segments,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from inkwell.anchoring.selection import SelectionAnchor
    from inkwell.overlay.segments import Segment

logger = logging.getLogger(__name__)


class WorkshopState:
    """Annotation set plus transient selection state for one open piece.

    Attributes:
        comments: Comment records in arrival order, unique by id.
        active_id: Id of the focused comment, if any.
        selection: Latest valid selection anchor (toolbar showing).
        draft: The in-progress annotation awaiting comment text.
    """

    def __init__(self) -> None:
        self.comments: list[CommentRecord] = []
        self.active_id: str | None = None
        self.selection: SelectionAnchor | None = None
        self.draft: Annotation | None = None
        self.highlight_tools_enabled = True

    # -----------------------------------------------------------------
    # Comment set
    # -----------------------------------------------------------------

    def _index_of(self, comment_id: str) -> int | None:
        for index, comment in enumerate(self.comments):
            if comment.id == comment_id:
                return index
        return None

    def load(self, records: Iterable[CommentRecord]) -> None:
        """Replace the comment set, keeping the first record for each id."""
        self.comments = []
        for record in records:
            if self._index_of(record.id) is None:
                self.comments.append(record)
        if self.active_id is not None and self._index_of(self.active_id) is None:
            self.active_id = None

    def merge_remote_insert(self, record: CommentRecord) -> bool:
        """Merge a pushed insert. Returns False when the id is already known.

        The local save and the push for the same row race each other, so
        either may arrive first.
        """
        if self._index_of(record.id) is not None:
            logger.debug("Ignoring duplicate insert for comment %s", record.id)
            return False
        self.comments.append(record)
        return True

    def add_saved(self, record: CommentRecord) -> None:
        """Record a locally saved comment and close the draft."""
        index = self._index_of(record.id)
        if index is None:
            self.comments.append(record)
        else:
            self.comments[index] = record
        self.draft = None
        self.selection = None

    def replace(self, record: CommentRecord) -> None:
        """Swap in an updated record (e.g. resolved flag changed)."""
        index = self._index_of(record.id)
        if index is None:
            msg = f"Unknown comment id: {record.id}"
            raise KeyError(msg)
        self.comments[index] = record

    def remove(self, comment_id: str) -> None:
        """Drop a deleted comment and its replies."""
        self.comments = [
            c
            for c in self.comments
            if c.id != comment_id and c.parent_comment_id != comment_id
        ]
        if self.active_id == comment_id:
            self.active_id = None

    def annotations(self) -> list[Annotation]:
        """Anchored annotations for the overlay (replies excluded)."""
        result: list[Annotation] = []
        for comment in self.comments:
            annotation = comment.to_annotation()
            if annotation is not None:
                result.append(annotation)
        return result

    # -----------------------------------------------------------------
    # Focus, selection and draft
    # -----------------------------------------------------------------

    def set_active(self, comment_id: str | None) -> None:
        """Focus a comment. Draft ids are not addressable and are ignored."""
        if comment_id == DRAFT_ANNOTATION_ID:
            return
        self.active_id = comment_id

    def set_selection(self, anchor: SelectionAnchor | None) -> None:
        if not self.highlight_tools_enabled:
            self.selection = None
            return
        self.selection = anchor

    def set_highlight_tools_enabled(self, enabled: bool) -> None:
        """Losing highlight permission clears both selection and draft."""
        self.highlight_tools_enabled = enabled
        if not enabled:
            self.selection = None
            self.draft = None

    def begin_draft(
        self, anchor: SelectionAnchor, kind: AnnotationKind | str = "highlight"
    ) -> Annotation | None:
        """Turn a selection into the single draft annotation.

        Replaces any earlier draft. Returns ``None`` when highlight tools are
        disabled.
        """
        if not self.highlight_tools_enabled:
            return None
        self.draft = Annotation(
            id=DRAFT_ANNOTATION_ID,
            start=anchor.start,
            end=anchor.end,
            kind=normalise_kind(kind),
            text=anchor.text,
            is_draft=True,
        )
        self.selection = None
        return self.draft

    def cancel_draft(self) -> None:
        self.draft = None
        self.selection = None

    def finalise_draft(
        self, text: str, piece_id: str, version_id: str | None = None
    ) -> PersistRequest:
        """Build the persistence request for the draft plus comment text.

        The draft stays in place until ``add_saved`` confirms the save, so a
        failed save keeps the user's highlight.

        Raises:
            ValueError: No draft is open or *text* is blank.
        """
        if self.draft is None:
            msg = "No draft annotation to finalise"
            raise ValueError(msg)
        if not text or not text.strip():
            msg = "Comment text must not be empty"
            raise ValueError(msg)
        return PersistRequest(
            piece_id=piece_id,
            version_id=version_id,
            content=text,
            selection_json=SelectionJson(
                text=self.draft.text,
                start=self.draft.start,
                end=self.draft.end,
                type=self.draft.kind,
            ),
        )

    def segments(self, content: str) -> list[Segment]:
        """Render the overlay for *content* from the current state."""
        return render_segments(
            content,
            self.annotations(),
            active_id=self.active_id,
            draft_annotation=self.draft,
        )
