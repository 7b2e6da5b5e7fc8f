"""In-memory comment store.

Implements ``CommentStoreProtocol`` without a backend. Used by the demo
workshop page and by tests. Insert subscribers are notified after every
create, in registration order; a subscriber that raises is logged and the
remaining subscribers still run.
"""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING

from inkwell.input_pipeline import detect_content_type, prepare_manuscript
from inkwell.models import CommentRecord, PieceRecord, VersionRecord

if TYPE_CHECKING:
    from collections.abc import Iterable

    from inkwell.data.protocol import InsertCallback, Unsubscribe
    from inkwell.models import PersistRequest, PieceStatus

logger = logging.getLogger(__name__)


class InMemoryCommentStore:
    """Dict-backed implementation of CommentStoreProtocol.

    Also holds pieces so the demo page has something to open.
    """

    def __init__(self) -> None:
        self._comments: dict[str, CommentRecord] = {}
        self._pieces: dict[str, PieceRecord] = {}
        self._subscribers: dict[str, list[InsertCallback]] = {}

    # -----------------------------------------------------------------
    # Pieces
    # -----------------------------------------------------------------

    def add_piece(self, piece: PieceRecord) -> PieceRecord:
        self._pieces[piece.id] = piece
        return piece

    def get_piece(self, piece_id: str) -> PieceRecord | None:
        return self._pieces.get(piece_id)

    def list_pieces(self) -> list[PieceRecord]:
        return list(self._pieces.values())

    def set_piece_status(self, piece_id: str, status: PieceStatus) -> PieceRecord:
        """Mark a piece completed or reopen it.

        Raises:
            KeyError: Unknown piece id.
        """
        piece = self._pieces.get(piece_id)
        if piece is None:
            msg = f"Unknown piece id: {piece_id}"
            raise KeyError(msg)
        updated = piece.model_copy(update={"status": status})
        self._pieces[piece_id] = updated
        logger.info("Piece %s status -> %s", piece_id, status)
        return updated

    def add_version(
        self, piece_id: str, content: str | bytes, version_notes: str = ""
    ) -> PieceRecord:
        """Add a revised text and reopen the piece for review.

        Pasted HTML is detected and flattened like any other upload. The
        new version becomes the piece's display content.

        Raises:
            KeyError: Unknown piece id.
            ValueError: The content is blank once prepared.
        """
        piece = self._pieces.get(piece_id)
        if piece is None:
            msg = f"Unknown piece id: {piece_id}"
            raise KeyError(msg)
        text = prepare_manuscript(content, detect_content_type(content))
        if not text.strip():
            msg = "Content is required"
            raise ValueError(msg)
        current = piece.current_version
        version = VersionRecord(
            piece_id=piece_id,
            version_number=current.version_number + 1 if current else 1,
            content=text,
            version_notes=version_notes.strip(),
        )
        updated = piece.model_copy(
            update={"versions": [*piece.versions, version], "status": "in_review"}
        )
        self._pieces[piece_id] = updated
        logger.info(
            "Piece %s version %d (%d chars)",
            piece_id,
            version.version_number,
            len(text),
        )
        return updated

    # -----------------------------------------------------------------
    # Comments
    # -----------------------------------------------------------------

    def _require(self, comment_id: str) -> CommentRecord:
        try:
            return self._comments[comment_id]
        except KeyError:
            msg = f"Unknown comment id: {comment_id}"
            raise KeyError(msg) from None

    def seed(self, records: Iterable[CommentRecord]) -> None:
        """Store existing rows as-is, without notifying subscribers."""
        for record in records:
            self._comments[record.id] = record

    async def list_comments(self, piece_id: str) -> list[CommentRecord]:
        comments = [c for c in self._comments.values() if c.piece_id == piece_id]
        return sorted(comments, key=lambda c: c.created_at)

    async def create_comment(
        self, request: PersistRequest, author_id: str
    ) -> CommentRecord:
        record = CommentRecord(
            piece_id=request.piece_id,
            version_id=request.version_id,
            author_id=author_id,
            content=request.content,
            selection_json=request.selection_json,
            parent_comment_id=request.parent_comment_id,
        )
        self._comments[record.id] = record
        logger.info(
            "Created comment %s on piece %s (%d-%d)",
            record.id,
            record.piece_id,
            request.selection_json.start,
            request.selection_json.end,
        )
        await self._notify(record)
        return record

    async def add_reply(
        self, parent_id: str, content: str, author_id: str
    ) -> CommentRecord:
        """Store a reply to *parent_id*. Replies carry no anchor."""
        parent = self._require(parent_id)
        record = CommentRecord(
            piece_id=parent.piece_id,
            version_id=parent.version_id,
            author_id=author_id,
            content=content.strip(),
            parent_comment_id=parent_id,
        )
        self._comments[record.id] = record
        await self._notify(record)
        return record

    async def delete_comment(self, comment_id: str) -> None:
        self._require(comment_id)
        doomed = [
            c.id
            for c in self._comments.values()
            if c.id == comment_id or c.parent_comment_id == comment_id
        ]
        for key in doomed:
            del self._comments[key]
        logger.info("Deleted comment %s (%d rows)", comment_id, len(doomed))

    async def set_resolved(self, comment_id: str, resolved: bool) -> CommentRecord:
        record = self._require(comment_id).model_copy(update={"is_resolved": resolved})
        self._comments[comment_id] = record
        return record

    async def update_comment(self, comment_id: str, content: str) -> CommentRecord:
        text = content.strip()
        if not text:
            msg = "Comment text is required"
            raise ValueError(msg)
        record = self._require(comment_id).model_copy(update={"content": text})
        self._comments[comment_id] = record
        logger.info("Edited comment %s", comment_id)
        return record

    # -----------------------------------------------------------------
    # Insert subscriptions
    # -----------------------------------------------------------------

    def subscribe_inserts(self, piece_id: str, callback: InsertCallback) -> Unsubscribe:
        subscribers = self._subscribers.setdefault(piece_id, [])
        subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in subscribers:
                subscribers.remove(callback)

        return unsubscribe

    async def _notify(self, record: CommentRecord) -> None:
        for callback in list(self._subscribers.get(record.piece_id, ())):
            try:
                result = callback(record)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.warning(
                    "Insert subscriber failed for comment %s",
                    record.id,
                    exc_info=True,
                )
