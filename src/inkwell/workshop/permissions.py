"""Who may do what on the workshop page.

The owner manages the piece, resolves feedback and posts new versions.
Invited reviewers make highlights. Nobody comments once the piece is
completed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from inkwell.models import CommentRecord, PieceRecord, UserRecord


def is_owner(user: UserRecord | None, piece: PieceRecord | None) -> bool:
    return user is not None and piece is not None and user.id == piece.owner_id


def is_invited_reviewer(user: UserRecord | None, piece: PieceRecord | None) -> bool:
    """Email match against the invite list, ignoring case."""
    if user is None or piece is None or not user.email:
        return False
    email = user.email.lower()
    return any(invited.lower() == email for invited in piece.reviewer_emails)


def can_participate(user: UserRecord | None, piece: PieceRecord | None) -> bool:
    return is_owner(user, piece) or is_invited_reviewer(user, piece)


def is_completed(piece: PieceRecord | None) -> bool:
    return piece is not None and piece.status == "completed"


def can_use_highlight_tools(
    user: UserRecord | None, piece: PieceRecord | None, *, editing: bool = False
) -> bool:
    """Reviewers only, while the piece is open and not being edited."""
    return is_invited_reviewer(user, piece) and not is_completed(piece) and not editing


def can_edit_or_delete(
    user: UserRecord | None, piece: PieceRecord | None, comment: CommentRecord
) -> bool:
    return (
        user is not None and not is_completed(piece) and user.id == comment.author_id
    )


def can_resolve(
    user: UserRecord | None, piece: PieceRecord | None, comment: CommentRecord
) -> bool:
    """Only the owner resolves, and only top-level comments."""
    return not is_completed(piece) and is_owner(user, piece) and not comment.is_reply


def can_reply(
    user: UserRecord | None,
    piece: PieceRecord | None,
    comment: CommentRecord | None = None,
) -> bool:
    """Participants on an open piece; resolved threads take no replies."""
    if comment is not None and comment.is_resolved:
        return False
    return not is_completed(piece) and can_participate(user, piece)


def can_create_version(user: UserRecord | None, piece: PieceRecord | None) -> bool:
    """The owner revises a piece once its review round is complete."""
    return is_owner(user, piece) and is_completed(piece)
