"""Protocol defining the comment store interface.

The workshop page talks to persistence and realtime delivery only through
this interface. ``InMemoryCommentStore`` implements it for the demo page
and tests; a hosted backend client would implement it in production.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from inkwell.models import CommentRecord, PersistRequest

InsertCallback = Callable[["CommentRecord"], Awaitable[None] | None]
Unsubscribe = Callable[[], None]


@runtime_checkable
class CommentStoreProtocol(Protocol):
    """Protocol for comment stores."""

    async def list_comments(self, piece_id: str) -> list[CommentRecord]:
        """Return every comment on a piece, replies included, oldest first.

        Args:
            piece_id: The piece whose comments to fetch.
        """
        ...

    async def create_comment(
        self, request: PersistRequest, author_id: str
    ) -> CommentRecord:
        """Persist a new comment and notify insert subscribers.

        Args:
            request: Anchor and comment text built from a finalised draft.
            author_id: Id of the signed-in user.

        Returns:
            The stored record, including its assigned id.
        """
        ...

    async def delete_comment(self, comment_id: str) -> None:
        """Delete a comment and its replies.

        Raises:
            KeyError: Unknown comment id.
        """
        ...

    async def set_resolved(self, comment_id: str, resolved: bool) -> CommentRecord:
        """Set the resolved flag and return the updated record.

        Raises:
            KeyError: Unknown comment id.
        """
        ...

    async def update_comment(self, comment_id: str, content: str) -> CommentRecord:
        """Replace a comment's text. The anchor is unchanged.

        Raises:
            KeyError: Unknown comment id.
            ValueError: *content* is blank.
        """
        ...

    def subscribe_inserts(self, piece_id: str, callback: InsertCallback) -> Unsubscribe:
        """Register *callback* for comments inserted on *piece_id*.

        Delivery may duplicate a record the caller already holds from its own
        save; callers deduplicate by id.

        Returns:
            A callable that removes the subscription.
        """
        ...
