"""Workshop page logic independent of the UI framework."""

from inkwell.workshop.permissions import (
    can_create_version,
    can_edit_or_delete,
    can_participate,
    can_reply,
    can_resolve,
    can_use_highlight_tools,
    is_invited_reviewer,
    is_owner,
)
from inkwell.workshop.sidebar import (
    filter_sidebar_comments,
    group_replies,
    unique_commenters,
)
from inkwell.workshop.state import WorkshopState
from inkwell.workshop.toolbar import ToolbarPosition, toolbar_position, word_count

__all__ = [
    "ToolbarPosition",
    "WorkshopState",
    "can_create_version",
    "can_edit_or_delete",
    "can_participate",
    "can_reply",
    "can_resolve",
    "can_use_highlight_tools",
    "filter_sidebar_comments",
    "group_replies",
    "is_invited_reviewer",
    "is_owner",
    "toolbar_position",
    "unique_commenters",
    "word_count",
]
