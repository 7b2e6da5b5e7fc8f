"""Tests for WorkshopState: comment set, focus, selection and draft lifecycle."""

from __future__ import annotations

import pytest

from inkwell.anchoring import Rect, SelectionAnchor
from inkwell.overlay import DRAFT_ANNOTATION_ID, HighlightSegment
from inkwell.workshop import WorkshopState
from tests.helpers.factories import comment, highlights, joined

CONTENT = "The quick brown fox jumps over the lazy dog."


def _anchor(start: int, end: int) -> SelectionAnchor:
    return SelectionAnchor(
        text=CONTENT[start:end].strip(),
        start=start,
        end=end,
        rect=Rect(top=10, left=10, width=40, height=18),
    )


class TestCommentSet:
    """Loading, merging and removing comments."""

    def test_load_dedups_by_id(self) -> None:
        """The first record for an id wins."""
        state = WorkshopState()
        state.load([comment("c1", 4, 9), comment("c1", 10, 15), comment("c2", 16, 19)])
        assert [c.id for c in state.comments] == ["c1", "c2"]
        assert state.comments[0].selection.start == 4

    def test_load_clears_stale_focus(self) -> None:
        """A focused comment that no longer exists loses focus."""
        state = WorkshopState()
        state.load([comment("c1", 4, 9)])
        state.set_active("c1")
        state.load([comment("c2", 10, 15)])
        assert state.active_id is None

    def test_merge_remote_insert(self) -> None:
        """New ids are appended; known ids are ignored."""
        state = WorkshopState()
        state.load([comment("c1", 4, 9)])
        assert state.merge_remote_insert(comment("c2", 10, 15)) is True
        assert state.merge_remote_insert(comment("c2", 10, 15)) is False
        assert [c.id for c in state.comments] == ["c1", "c2"]

    def test_add_saved_after_remote_insert_does_not_duplicate(self) -> None:
        """The push may beat the save response for the same row."""
        state = WorkshopState()
        state.merge_remote_insert(comment("c1", 4, 9))
        state.add_saved(comment("c1", 4, 9, content="final"))
        assert len(state.comments) == 1
        assert state.comments[0].body == "final"

    def test_replace_unknown_raises(self) -> None:
        """Replacing a comment that was never loaded is an error."""
        state = WorkshopState()
        with pytest.raises(KeyError, match="Unknown comment id"):
            state.replace(comment("missing"))

    def test_replace_swaps_record(self) -> None:
        """An updated record replaces the old one in place."""
        state = WorkshopState()
        state.load([comment("c1", 4, 9), comment("c2", 10, 15)])
        state.replace(comment("c1", 4, 9, is_resolved=True))
        assert state.comments[0].is_resolved
        assert [c.id for c in state.comments] == ["c1", "c2"]

    def test_remove_drops_replies_and_focus(self) -> None:
        """Deleting a comment takes its replies with it."""
        state = WorkshopState()
        state.load(
            [
                comment("c1", 4, 9),
                comment("r1", parent_comment_id="c1"),
                comment("c2", 10, 15),
            ]
        )
        state.set_active("c1")
        state.remove("c1")
        assert [c.id for c in state.comments] == ["c2"]
        assert state.active_id is None

    def test_annotations_exclude_replies(self) -> None:
        """Only top-level comments are anchored."""
        state = WorkshopState()
        state.load([comment("c1", 4, 9), comment("r1", parent_comment_id="c1")])
        assert [a.id for a in state.annotations()] == ["c1"]


class TestSelectionAndDraft:
    """Selection to draft to persistence request."""

    def test_set_active_ignores_draft_id(self) -> None:
        """The draft is not addressable, so it cannot take focus."""
        state = WorkshopState()
        state.set_active("c1")
        state.set_active(DRAFT_ANNOTATION_ID)
        assert state.active_id == "c1"

    def test_begin_draft_replaces_selection(self) -> None:
        """Choosing a tool turns the selection into the single draft."""
        state = WorkshopState()
        state.set_selection(_anchor(4, 9))
        draft = state.begin_draft(_anchor(4, 9), "strikethrough")
        assert draft is not None
        assert draft.is_draft
        assert (draft.start, draft.end, draft.kind) == (4, 9, "strikethrough")
        assert state.selection is None
        assert state.draft is draft

    def test_second_draft_replaces_first(self) -> None:
        """At most one draft exists."""
        state = WorkshopState()
        state.begin_draft(_anchor(4, 9))
        state.begin_draft(_anchor(10, 15))
        assert state.draft is not None
        assert (state.draft.start, state.draft.end) == (10, 15)

    def test_cancel_draft(self) -> None:
        """Cancelling clears draft and selection."""
        state = WorkshopState()
        state.begin_draft(_anchor(4, 9))
        state.cancel_draft()
        assert state.draft is None
        assert state.selection is None

    def test_finalise_builds_request(self) -> None:
        """The request carries the draft's anchor and the stripped text."""
        state = WorkshopState()
        state.begin_draft(_anchor(4, 9))
        request = state.finalise_draft("  Good word  ", "piece-1", "version-1")
        assert request.content == "Good word"
        assert request.piece_id == "piece-1"
        assert request.version_id == "version-1"
        assert request.selection_json.model_dump() == {
            "text": "quick",
            "start": 4,
            "end": 9,
            "type": "highlight",
        }
        # Kept until the save is confirmed
        assert state.draft is not None

    def test_finalise_without_draft(self) -> None:
        """No draft, no request."""
        state = WorkshopState()
        with pytest.raises(ValueError, match="No draft"):
            state.finalise_draft("text", "piece-1")

    def test_finalise_blank_text(self) -> None:
        """Whitespace-only comment text is refused and the draft survives."""
        state = WorkshopState()
        state.begin_draft(_anchor(4, 9))
        with pytest.raises(ValueError, match="must not be empty"):
            state.finalise_draft("   ", "piece-1")
        assert state.draft is not None

    def test_add_saved_closes_draft(self) -> None:
        """A confirmed save clears the draft."""
        state = WorkshopState()
        state.begin_draft(_anchor(4, 9))
        state.add_saved(comment("c1", 4, 9))
        assert state.draft is None
        assert [c.id for c in state.comments] == ["c1"]


class TestHighlightPermission:
    """Losing highlight tools mid-interaction."""

    def test_disabling_clears_selection_and_draft(self) -> None:
        """Both transient states are dropped."""
        state = WorkshopState()
        state.set_selection(_anchor(4, 9))
        state.begin_draft(_anchor(10, 15))
        state.set_selection(_anchor(16, 19))
        state.set_highlight_tools_enabled(False)
        assert state.selection is None
        assert state.draft is None

    def test_disabled_tools_refuse_new_selection_and_draft(self) -> None:
        """Selections and drafts are not accepted while disabled."""
        state = WorkshopState()
        state.set_highlight_tools_enabled(False)
        state.set_selection(_anchor(4, 9))
        assert state.selection is None
        assert state.begin_draft(_anchor(4, 9)) is None


class TestStateSegments:
    """Rendering from state."""

    def test_draft_and_active_rendered(self) -> None:
        """Saved, focused and draft annotations all reach the overlay."""
        state = WorkshopState()
        state.load([comment("c1", 4, 9), comment("c2", 10, 15)])
        state.set_active("c2")
        state.begin_draft(_anchor(16, 19))
        segments = state.segments(CONTENT)
        assert joined(segments) == CONTENT
        spans = highlights(segments)
        assert [(s.annotation_id, s.is_selected, s.is_draft) for s in spans] == [
            ("c1", False, False),
            ("c2", True, False),
            (DRAFT_ANNOTATION_ID, False, True),
        ]
        assert all(isinstance(s, HighlightSegment) for s in spans)

    def test_overlapping_draft_yields_to_saved(self) -> None:
        """A draft overlapping an earlier saved comment is not drawn."""
        state = WorkshopState()
        state.load([comment("c1", 4, 15)])
        state.begin_draft(_anchor(10, 19))
        spans = highlights(state.segments(CONTENT))
        assert [s.annotation_id for s in spans] == ["c1"]
