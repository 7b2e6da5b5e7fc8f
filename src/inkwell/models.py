"""Data-layer boundary records.

Comment rows reach the workshop in two shapes: the structured
``selection_json`` object and the legacy flat columns (``selected_text``,
``position_start``, ``position_end``, ``comment_type``) kept during the
backend migration. ``CommentRecord`` accepts both and normalises to a
single :class:`~inkwell.overlay.segments.Annotation` so the overlay never
sees the difference.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from inkwell.overlay.segments import Annotation, normalise_kind

PieceStatus = Literal["draft", "in_review", "completed"]


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _new_id() -> str:
    return str(uuid4())


# ---------------------------------------------------------------------------
# Pieces and participants
# ---------------------------------------------------------------------------


class UserRecord(BaseModel):
    """The signed-in user as the workshop sees it."""

    id: str
    email: str = ""
    display_name: str = ""

    model_config = ConfigDict(frozen=True)

    @property
    def label(self) -> str:
        if self.display_name:
            return self.display_name
        if self.email:
            return self.email.split("@")[0]
        return "Anonymous"


class VersionRecord(BaseModel):
    """A revised text of a piece, numbered from 1."""

    id: str = Field(default_factory=_new_id)
    piece_id: str = ""
    version_number: int = 1
    content: str = ""
    version_notes: str = ""
    created_at: datetime = Field(default_factory=_utcnow)

    model_config = ConfigDict(frozen=True)


class PieceRecord(BaseModel):
    """A manuscript under review.

    Attributes:
        id: Piece identifier.
        owner_id: Id of the writer who uploaded the piece.
        title: Display title.
        status: Review status; ``completed`` freezes commenting.
        content: Text as first uploaded.
        reviewer_emails: Emails of invited reviewers.
        versions: Revisions added since, oldest first.
    """

    id: str = Field(default_factory=_new_id)
    owner_id: str
    title: str = "Untitled"
    status: PieceStatus = "in_review"
    content: str = ""
    reviewer_emails: list[str] = Field(default_factory=list)
    versions: list[VersionRecord] = Field(default_factory=list)

    @property
    def current_version(self) -> VersionRecord | None:
        """The highest-numbered version, or ``None`` before any revision."""
        if not self.versions:
            return None
        return max(self.versions, key=lambda v: (v.version_number, v.created_at))

    @property
    def version_id(self) -> str | None:
        """Id new comments are linked to."""
        current = self.current_version
        return current.id if current else None

    @property
    def display_content(self) -> str:
        """Text being annotated: the current version, else the upload.

        This string is the offset space for the overlay and for new anchors.
        """
        current = self.current_version
        if current is not None and current.content:
            return current.content
        return self.content


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


class SelectionJson(BaseModel):
    """Structured anchor stored with a comment."""

    text: str = ""
    start: int = 0
    end: int = 0
    type: str = "highlight"

    model_config = ConfigDict(frozen=True)


class CommentRecord(BaseModel):
    """A comment row from the data layer, structured or legacy.

    Replies carry ``parent_comment_id`` and are never anchored.
    """

    id: str = Field(default_factory=_new_id)
    piece_id: str = ""
    version_id: str | None = None
    author_id: str = ""
    content: str | None = None
    comment_text: str | None = None
    selection_json: SelectionJson | None = None
    selected_text: str | None = None
    position_start: int | None = None
    position_end: int | None = None
    comment_type: str | None = None
    parent_comment_id: str | None = None
    is_resolved: bool = False
    created_at: datetime = Field(default_factory=_utcnow)

    model_config = ConfigDict(extra="ignore")

    @field_validator("id", "piece_id", "author_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        # UUID columns arrive as UUID objects from some drivers
        if value is not None and not isinstance(value, str):
            return str(value)
        return value

    @property
    def body(self) -> str:
        """Comment text, preferring ``content`` over legacy ``comment_text``."""
        return self.content or self.comment_text or ""

    @property
    def is_reply(self) -> bool:
        return self.parent_comment_id is not None

    @property
    def selection(self) -> SelectionJson:
        """The anchor, structured fields first, then legacy columns.

        Missing values default to ``""``, ``0`` and ``"highlight"``.
        """
        structured = self.selection_json or SelectionJson()
        return SelectionJson(
            text=structured.text or self.selected_text or "",
            start=structured.start or self.position_start or 0,
            end=structured.end or self.position_end or 0,
            type=(
                (self.selection_json.type if self.selection_json else None)
                or self.comment_type
                or "highlight"
            ),
        )

    @property
    def kind(self) -> str:
        """Sidebar type: ``comment`` for rows with no anchor at all."""
        if self.selection_json is not None:
            return self.selection_json.type
        return self.comment_type or "comment"

    def to_annotation(self) -> Annotation | None:
        """Normalise to the overlay's annotation shape; ``None`` for replies."""
        if self.is_reply:
            return None
        selection = self.selection
        return Annotation(
            id=self.id,
            start=selection.start,
            end=selection.end,
            kind=normalise_kind(selection.type),
            text=selection.text,
            is_resolved=self.is_resolved,
        )


class PersistRequest(BaseModel):
    """Payload for creating a comment from a finalised draft."""

    piece_id: str
    version_id: str | None = None
    content: str = Field(min_length=1)
    selection_json: SelectionJson
    parent_comment_id: str | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("content", mode="before")
    @classmethod
    def _strip_content(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value
