"""Comment sidebar list: filtering, reply threading and commenter list."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from inkwell.models import CommentRecord

KIND_FILTER_ALL = "all"


def filter_sidebar_comments(
    records: Iterable[CommentRecord],
    visible_commenters: Mapping[str, bool] | None = None,
    query: str = "",
    kind_filter: str = KIND_FILTER_ALL,
) -> list[CommentRecord]:
    """Top-level comments that pass the sidebar filters.

    Args:
        records: All comments for the piece.
        visible_commenters: Visibility toggles by author id; an author whose
            value is ``False`` is hidden, absent authors are shown.
        query: Case-insensitive substring matched against the comment body
            and the anchored text. Blank queries match everything.
        kind_filter: ``"all"`` or a type such as ``"highlight"``. Comments
            without an anchor have type ``"comment"``.
    """
    visibility = visible_commenters or {}
    needle = query.lower() if query.strip() else ""
    result: list[CommentRecord] = []
    for record in records:
        if record.is_reply:
            continue
        if visibility.get(record.author_id) is False:
            continue
        if needle:
            anchored = record.selection_json.text if record.selection_json else ""
            if needle not in record.body.lower() and needle not in anchored.lower():
                continue
        if kind_filter != KIND_FILTER_ALL and record.kind != kind_filter:
            continue
        result.append(record)
    return result


def group_replies(records: Iterable[CommentRecord]) -> dict[str, list[CommentRecord]]:
    """Map parent comment id to its replies, oldest first."""
    threads: dict[str, list[CommentRecord]] = {}
    for record in records:
        if record.parent_comment_id is None:
            continue
        threads.setdefault(record.parent_comment_id, []).append(record)
    for replies in threads.values():
        replies.sort(key=lambda r: r.created_at)
    return threads


def unique_commenters(records: Iterable[CommentRecord]) -> list[str]:
    """Distinct non-empty author ids in first-seen order."""
    return list(dict.fromkeys(r.author_id for r in records if r.author_id))
