"""Tests for workshop role checks."""

from __future__ import annotations

from typing import TYPE_CHECKING

from inkwell.workshop import (
    can_create_version,
    can_edit_or_delete,
    can_participate,
    can_reply,
    can_resolve,
    can_use_highlight_tools,
    is_invited_reviewer,
    is_owner,
)
from tests.helpers.factories import comment

if TYPE_CHECKING:
    from inkwell.models import PieceRecord, UserRecord


def _completed(piece: PieceRecord) -> PieceRecord:
    return piece.model_copy(update={"status": "completed"})


class TestRoles:
    """Owner and invited reviewer detection."""

    def test_owner(
        self, owner: UserRecord, reviewer: UserRecord, piece: PieceRecord
    ) -> None:
        """Ownership is by user id."""
        assert is_owner(owner, piece)
        assert not is_owner(reviewer, piece)
        assert not is_owner(None, piece)
        assert not is_owner(owner, None)

    def test_reviewer_email_ignores_case(
        self, reviewer: UserRecord, piece: PieceRecord
    ) -> None:
        """Reviewer@Example.com matches the invite for reviewer@example.com."""
        assert is_invited_reviewer(reviewer, piece)

    def test_stranger(self, stranger: UserRecord, piece: PieceRecord) -> None:
        """Neither owner nor invited: no participation."""
        assert not is_invited_reviewer(stranger, piece)
        assert not can_participate(stranger, piece)


class TestHighlightTools:
    """Who sees the selection toolbar."""

    def test_reviewer_on_open_piece(
        self, reviewer: UserRecord, piece: PieceRecord
    ) -> None:
        """Invited reviewers highlight while the piece is in review."""
        assert can_use_highlight_tools(reviewer, piece)

    def test_owner_cannot_highlight(
        self, owner: UserRecord, piece: PieceRecord
    ) -> None:
        """The writer does not annotate their own piece."""
        assert not can_use_highlight_tools(owner, piece)

    def test_disabled_while_editing(
        self, reviewer: UserRecord, piece: PieceRecord
    ) -> None:
        """Editing a comment suspends highlighting."""
        assert not can_use_highlight_tools(reviewer, piece, editing=True)

    def test_disabled_when_completed(
        self, reviewer: UserRecord, piece: PieceRecord
    ) -> None:
        """Completed pieces are read-only."""
        assert not can_use_highlight_tools(reviewer, _completed(piece))


class TestCommentActions:
    """Edit, delete, resolve and reply."""

    def test_author_may_edit(self, reviewer: UserRecord, piece: PieceRecord) -> None:
        """Authors manage their own comments."""
        assert can_edit_or_delete(reviewer, piece, comment("c1", author_id=reviewer.id))

    def test_others_may_not_edit(self, owner: UserRecord, piece: PieceRecord) -> None:
        """Even the owner cannot edit someone else's comment."""
        assert not can_edit_or_delete(owner, piece, comment("c1", author_id="x"))

    def test_no_edits_after_completion(
        self, reviewer: UserRecord, piece: PieceRecord
    ) -> None:
        """Completion freezes every comment."""
        own = comment("c1", author_id=reviewer.id)
        assert not can_edit_or_delete(reviewer, _completed(piece), own)

    def test_owner_resolves_top_level_only(
        self, owner: UserRecord, piece: PieceRecord
    ) -> None:
        """Replies cannot be resolved on their own."""
        assert can_resolve(owner, piece, comment("c1"))
        assert not can_resolve(owner, piece, comment("r1", parent_comment_id="c1"))

    def test_reviewer_cannot_resolve(
        self, reviewer: UserRecord, piece: PieceRecord
    ) -> None:
        """Resolving is the writer's call."""
        assert not can_resolve(reviewer, piece, comment("c1"))

    def test_reply(
        self,
        owner: UserRecord,
        reviewer: UserRecord,
        stranger: UserRecord,
        piece: PieceRecord,
    ) -> None:
        """Participants reply while the piece is open."""
        assert can_reply(owner, piece)
        assert can_reply(reviewer, piece)
        assert not can_reply(stranger, piece)
        assert not can_reply(owner, _completed(piece))

    def test_no_replies_on_resolved_thread(
        self, reviewer: UserRecord, piece: PieceRecord
    ) -> None:
        """A resolved comment's reply box is closed; reopening restores it."""
        resolved = comment("c1", is_resolved=True)
        assert not can_reply(reviewer, piece, resolved)
        reopened = resolved.model_copy(update={"is_resolved": False})
        assert can_reply(reviewer, piece, reopened)


class TestVersions:
    """Posting a revised text."""

    def test_owner_after_completion(
        self, owner: UserRecord, reviewer: UserRecord, piece: PieceRecord
    ) -> None:
        """Only the owner, and only once the review round is complete."""
        assert not can_create_version(owner, piece)
        assert can_create_version(owner, _completed(piece))
        assert not can_create_version(reviewer, _completed(piece))
