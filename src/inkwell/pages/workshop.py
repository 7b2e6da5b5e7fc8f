"""Workshop page: read a manuscript, select passages, attach comments.

Route: /workshop?piece_id=...&as_user=writer|reviewer|guest

Selection offsets are computed in the browser on ``mouseup`` (the live
range is gone by the time a round trip completes) and validated here with
``anchor_from_event``. Everything else, from the draft lifecycle to the
overlay render and the sidebar, runs server-side from ``WorkshopState``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from nicegui import ui

from inkwell.anchoring import Rect, anchor_from_event
from inkwell.config import get_settings
from inkwell.data.demo import DEMO_PIECE_ID, DEMO_USERS, get_demo_store
from inkwell.overlay import segments_to_html
from inkwell.pages.layout import page_layout, require_demo_enabled
from inkwell.pages.registry import page_route
from inkwell.workshop import (
    WorkshopState,
    can_create_version,
    can_edit_or_delete,
    can_reply,
    can_resolve,
    can_use_highlight_tools,
    filter_sidebar_comments,
    group_replies,
    is_owner,
    toolbar_position,
    unique_commenters,
    word_count,
)
from inkwell.workshop.sidebar import KIND_FILTER_ALL
from inkwell.workshop.toolbar import truncate

if TYPE_CHECKING:
    from collections.abc import Callable

    from nicegui.events import GenericEventArguments

    from inkwell.data.memory import InMemoryCommentStore
    from inkwell.models import CommentRecord, PieceRecord, UserRecord

logger = logging.getLogger(__name__)

_CSS_FILE = Path(__file__).parent.parent / "static" / "workshop.css"

KIND_FILTER_OPTIONS = {
    KIND_FILTER_ALL: "All types",
    "highlight": "Highlights",
    "strikethrough": "Strikethroughs",
    "comment": "General comments",
}


@dataclass
class _PageState:
    """Per-client page state: data, filters and UI element references."""

    piece: PieceRecord
    user: UserRecord
    store: InMemoryCommentStore
    workshop: WorkshopState = field(default_factory=WorkshopState)
    query: str = ""
    kind_filter: str = KIND_FILTER_ALL
    visible_commenters: dict[str, bool] = field(default_factory=dict)
    editing_id: str | None = None
    manuscript: ui.html | None = None
    toolbar: ui.row | None = None
    sidebar: ui.column | None = None
    word_count_label: ui.label | None = None
    refresh: Callable[[], None] | None = None


def _resolve_user(as_user: str) -> UserRecord:
    return DEMO_USERS.get(as_user, DEMO_USERS["guest"])


def _author_label(author_id: str) -> str:
    for user in DEMO_USERS.values():
        if user.id == author_id:
            return user.label
    return "Reviewer"


# ---------------------------------------------------------------------------
# Manuscript and toolbar
# ---------------------------------------------------------------------------


def _render_manuscript(state: _PageState) -> None:
    if state.manuscript is None:
        return
    segments = state.workshop.segments(state.piece.display_content)
    state.manuscript.set_content(segments_to_html(segments))


def _hide_toolbar(state: _PageState) -> None:
    if state.toolbar is not None:
        state.toolbar.set_visibility(False)


def _show_toolbar(state: _PageState, rect: Rect) -> None:
    if state.toolbar is None:
        return
    cfg = get_settings().workshop
    pos = toolbar_position(
        rect,
        width=cfg.toolbar_width,
        height=cfg.toolbar_height,
        margin=cfg.toolbar_margin,
    )
    state.toolbar.style(f"top: {pos.top}px; left: {pos.left}px;")
    state.toolbar.set_visibility(True)


def _begin_draft(state: _PageState, kind: str) -> None:
    anchor = state.workshop.selection
    if anchor is None:
        return
    if state.workshop.begin_draft(anchor, kind) is None:
        return
    logger.debug("Draft %s at %d-%d", kind, anchor.start, anchor.end)
    _hide_toolbar(state)
    ui.run_javascript("window.getSelection().removeAllRanges();")
    if state.refresh:
        state.refresh()


def _build_toolbar(state: _PageState) -> ui.row:
    with ui.row().classes("selection-toolbar items-center no-wrap gap-0 p-1") as bar:
        ui.button(
            "Highlight",
            icon="highlight",
            on_click=lambda: _begin_draft(state, "highlight"),
        ).props("flat dense no-caps size=sm").props('data-testid="toolbar-highlight"')
        ui.button(
            "Strike",
            icon="strikethrough_s",
            on_click=lambda: _begin_draft(state, "strikethrough"),
        ).props("flat dense no-caps size=sm").props('data-testid="toolbar-strike"')
    bar.set_visibility(False)
    return bar


# ---------------------------------------------------------------------------
# Draft and sidebar
# ---------------------------------------------------------------------------


async def _save_draft(state: _PageState, editor: ui.textarea) -> None:
    if not can_use_highlight_tools(state.user, state.piece):
        return
    try:
        request = state.workshop.finalise_draft(
            editor.value or "", state.piece.id, state.piece.version_id
        )
    except ValueError as exc:
        ui.notify(str(exc), type="warning")
        return
    try:
        record = await state.store.create_comment(request, state.user.id)
    except Exception:
        logger.exception("Failed to save comment on piece %s", state.piece.id)
        ui.notify("Save failed", type="negative")
        return
    state.workshop.add_saved(record)
    ui.notify("Feedback saved!", type="positive")
    if state.refresh:
        state.refresh()


def _cancel_draft(state: _PageState) -> None:
    state.workshop.cancel_draft()
    if state.refresh:
        state.refresh()


def _build_draft_editor(state: _PageState) -> None:
    draft = state.workshop.draft
    if draft is None:
        return
    max_len = get_settings().workshop.max_display_length
    with ui.card().classes("w-full").props('data-testid="draft-editor"'):
        ui.label(f"New {draft.kind}").classes("text-xs uppercase text-grey-7")
        ui.label(f'"{truncate(draft.text, max_len)}"').classes("quoted text-sm")
        editor = ui.textarea(placeholder="Add your feedback...").classes("w-full")
        with ui.row().classes("w-full justify-end gap-2"):
            ui.button("Cancel", on_click=lambda: _cancel_draft(state)).props("flat")
            ui.button("Save", on_click=lambda: _save_draft(state, editor))


async def _toggle_resolved(state: _PageState, comment: CommentRecord) -> None:
    record = await state.store.set_resolved(comment.id, not comment.is_resolved)
    state.workshop.replace(record)
    if state.refresh:
        state.refresh()


async def _delete_comment(state: _PageState, comment: CommentRecord) -> None:
    await state.store.delete_comment(comment.id)
    state.workshop.remove(comment.id)
    ui.notify("Comment deleted")
    if state.refresh:
        state.refresh()


def _set_editing(state: _PageState, comment_id: str | None) -> None:
    state.editing_id = comment_id
    # Highlighting is suspended while a comment is being edited
    state.workshop.set_highlight_tools_enabled(
        can_use_highlight_tools(
            state.user, state.piece, editing=comment_id is not None
        )
    )
    if comment_id is not None:
        _hide_toolbar(state)
    if state.refresh:
        state.refresh()


async def _save_edit(
    state: _PageState, comment: CommentRecord, editor: ui.textarea
) -> None:
    try:
        record = await state.store.update_comment(comment.id, editor.value or "")
    except ValueError as exc:
        ui.notify(str(exc), type="warning")
        return
    state.workshop.replace(record)
    ui.notify("Comment updated", type="positive")
    _set_editing(state, None)


def _build_comment_editor(state: _PageState, comment: CommentRecord) -> None:
    editor = ui.textarea(value=comment.body).classes("w-full")
    editor.props('data-testid="comment-editor"')
    with ui.row().classes("w-full justify-end gap-2"):
        ui.button("Cancel", on_click=lambda: _set_editing(state, None)).props(
            "flat dense"
        )
        ui.button(
            "Save", on_click=lambda c=comment: _save_edit(state, c, editor)
        ).props("dense")


async def _post_reply(state: _PageState, parent: CommentRecord, inp: ui.input) -> None:
    text = (inp.value or "").strip()
    if not text:
        return
    await state.store.add_reply(parent.id, text, state.user.id)
    inp.value = ""


def _focus_js(comment_id: str) -> str:
    """Scroll the highlight for *comment_id* into view.

    The id is encoded twice: as a CSS string inside the selector, then as a
    JS string literal around the selector.
    """
    selector = f"[data-annotation-id={json.dumps(comment_id)}]"
    return (
        f"document.querySelector({json.dumps(selector)})"
        "?.scrollIntoView({behavior: 'smooth', block: 'center'});"
    )


async def _focus_comment(state: _PageState, comment_id: str) -> None:
    # Clicks inside an active card (editor, reply box) must not rebuild it
    if state.workshop.active_id == comment_id:
        return
    state.workshop.set_active(comment_id)
    if state.refresh:
        state.refresh()
    await ui.run_javascript(_focus_js(comment_id))


def _build_comment_card(
    state: _PageState, comment: CommentRecord, replies: list[CommentRecord]
) -> None:
    active = comment.id == state.workshop.active_id
    max_len = get_settings().workshop.max_display_length
    card = (
        ui.card()
        .classes("comment-card w-full cursor-pointer" + (" active" if active else ""))
        .props(f'data-testid="comment-card" data-comment-id="{comment.id}"')
    )
    card.on("click", lambda _e, cid=comment.id: _focus_comment(state, cid))
    with card:
        with ui.row().classes("w-full justify-between items-center"):
            ui.label(_author_label(comment.author_id)).classes("text-xs font-bold")
            with ui.row().classes("gap-1"):
                if can_resolve(state.user, state.piece, comment):
                    ui.button(
                        icon="undo" if comment.is_resolved else "check",
                        on_click=lambda c=comment: _toggle_resolved(state, c),
                    ).props("flat dense size=xs").tooltip(
                        "Reopen" if comment.is_resolved else "Resolve"
                    )
                if can_edit_or_delete(state.user, state.piece, comment):
                    ui.button(
                        icon="edit",
                        on_click=lambda cid=comment.id: _set_editing(state, cid),
                    ).props("flat dense size=xs").tooltip("Edit")
                    ui.button(
                        icon="delete",
                        on_click=lambda c=comment: _delete_comment(state, c),
                    ).props("flat dense size=xs").tooltip("Delete")
        selection = comment.selection
        if selection.text:
            ui.label(f'"{truncate(selection.text, max_len)}"').classes(
                "quoted text-sm"
            )
        if state.editing_id == comment.id:
            _build_comment_editor(state, comment)
        else:
            ui.label(comment.body).classes("text-sm")
        if comment.is_resolved:
            ui.badge("Resolved", color="grey")

        for reply in replies:
            with ui.element("div").classes("bg-gray-100 p-2 rounded mt-1 w-full"):
                ui.label(_author_label(reply.author_id)).classes("text-xs font-bold")
                ui.label(reply.body).classes("text-sm")

        if can_reply(state.user, state.piece, comment):
            inp = ui.input(placeholder="Reply...").props("dense").classes("w-full")
            ui.button(
                "Reply", on_click=lambda c=comment, i=inp: _post_reply(state, c, i)
            ).props("dense flat size=sm")


def _render_sidebar(state: _PageState) -> None:
    if state.sidebar is None:
        return
    state.sidebar.clear()
    comments = state.workshop.comments
    visible = filter_sidebar_comments(
        comments, state.visible_commenters, state.query, state.kind_filter
    )
    threads = group_replies(comments)
    with state.sidebar:
        _build_draft_editor(state)
        if state.workshop.draft is None and not visible:
            ui.label("No comments yet.").classes("text-grey-6 text-sm")
        for comment in visible:
            _build_comment_card(state, comment, threads.get(comment.id, []))


def _build_filters(state: _PageState) -> None:
    def on_query(e: Any) -> None:
        state.query = e.value or ""
        _render_sidebar(state)

    def on_kind(e: Any) -> None:
        state.kind_filter = e.value or KIND_FILTER_ALL
        _render_sidebar(state)

    def toggle_author(author_id: str, visible: bool) -> None:
        state.visible_commenters[author_id] = visible
        _render_sidebar(state)

    ui.input(placeholder="Search comments", on_change=on_query).props(
        "dense clearable"
    ).classes("w-full")
    ui.select(KIND_FILTER_OPTIONS, value=KIND_FILTER_ALL, on_change=on_kind).props(
        "dense"
    ).classes("w-full")
    with ui.expansion("Commenters").classes("w-full"):
        for author_id in unique_commenters(state.workshop.comments):
            ui.checkbox(
                _author_label(author_id),
                value=state.visible_commenters.get(author_id) is not False,
                on_change=lambda e, a=author_id: toggle_author(a, bool(e.value)),
            )


# ---------------------------------------------------------------------------
# Page
# ---------------------------------------------------------------------------


def _selection_js(root_id: int, debounce_ms: int) -> str:
    return f"""
        const root = getHtmlElement({root_id});
        const DEBOUNCE_MS = {debounce_ms};

        function rectOf(r) {{
            return {{top: r.top, left: r.left, width: r.width, height: r.height}};
        }}

        function checkAndEmitSelection() {{
            const selection = window.getSelection();
            if (!selection || selection.rangeCount === 0 || selection.isCollapsed) {{
                emitEvent('selection_cleared', {{}});
                return;
            }}
            const range = selection.getRangeAt(0);
            if (!root.contains(range.commonAncestorContainer)) {{
                emitEvent('selection_cleared', {{}});
                return;
            }}

            // Characters between the root's start and the range start
            const preRange = document.createRange();
            preRange.selectNodeContents(root);
            preRange.setEnd(range.startContainer, range.startOffset);

            emitEvent('text_selected', {{
                text: range.toString(),
                start: preRange.toString().length,
                rect: rectOf(range.getBoundingClientRect()),
                root_rect: rectOf(root.getBoundingClientRect()),
            }});
        }}

        // Document-wide so a drag released outside the root still reports
        document.addEventListener('mouseup', function() {{
            setTimeout(checkAndEmitSelection, DEBOUNCE_MS);
        }});

        root.addEventListener('click', function(e) {{
            if (!window.getSelection().isCollapsed) return;
            const span = e.target.closest('[data-annotation-id]');
            if (span && root.contains(span)) {{
                emitEvent('annotation_clicked', {{id: span.dataset.annotationId}});
            }}
        }});

        root.setAttribute('data-handlers-ready', 'true');
    """


@page_route(
    "/workshop",
    title="Workshop",
    icon="rate_review",
    category="demo",
    requires_demo=True,
    order=10,
)
async def workshop_page(
    piece_id: str = DEMO_PIECE_ID, as_user: str = "reviewer"
) -> None:
    """Annotate a piece from the in-memory demo store."""
    if not require_demo_enabled():
        return

    settings = get_settings()
    store = get_demo_store(settings.dev.seed_demo_piece)
    piece = store.get_piece(piece_id)
    if piece is None:
        ui.label("Unable to load this manuscript.").classes("text-h6 text-red-500")
        ui.button("Back", on_click=lambda: ui.navigate.to("/")).classes("mt-4")
        return

    state = _PageState(piece=piece, user=_resolve_user(as_user), store=store)
    state.workshop.load(await store.list_comments(piece.id))
    state.workshop.set_highlight_tools_enabled(
        can_use_highlight_tools(state.user, piece)
    )

    def refresh() -> None:
        _render_manuscript(state)
        _render_sidebar(state)

    state.refresh = refresh
    ui.add_css(_CSS_FILE)

    with page_layout(piece.title, subtitle=f"Signed in as {state.user.label}"):
        with ui.row().classes("w-full no-wrap gap-6 items-start"):
            with ui.column().classes("flex-grow"):
                with ui.row().classes("items-center gap-4"):
                    state.word_count_label = ui.label(
                        f"{word_count(piece.display_content)} words"
                    ).classes("text-caption text-grey-7")
                    ui.label(piece.status.replace("_", " ")).classes(
                        "text-caption text-grey-7"
                    )
                    if is_owner(state.user, piece):
                        _build_status_toggle(state)
                    if can_create_version(state.user, piece):
                        _build_version_dialog_button(state)
                with ui.card().classes("w-full p-6"):
                    with ui.element("div").classes("manuscript-frame w-full"):
                        state.manuscript = (
                            ui.html("", sanitize=False)
                            .classes("manuscript")
                            .props('data-manuscript-root="true"')
                        )
                        state.toolbar = _build_toolbar(state)
                if piece.versions:
                    _build_version_history(state)
            with ui.column().classes("w-96 shrink-0"):
                ui.label("Feedback").classes("text-h6")
                _build_filters(state)
                state.sidebar = ui.column().classes("w-full gap-2")

    refresh()

    def handle_selection(e: GenericEventArguments) -> None:
        """Validate the browser's selection payload and show the toolbar.

        Expected e.args:
            text (str): Raw selected text.
            start (int): Characters before the selection within the root.
            rect (dict): Selection bounding rect.
            root_rect (dict): Root element bounding rect.
        """
        if not state.workshop.highlight_tools_enabled:
            return
        anchor = anchor_from_event(e.args, state.piece.display_content)
        state.workshop.set_selection(anchor)
        if anchor is None:
            _hide_toolbar(state)
            return
        _show_toolbar(state, anchor.rect)

    def handle_cleared(_e: GenericEventArguments) -> None:
        state.workshop.set_selection(None)
        _hide_toolbar(state)

    def handle_click(e: GenericEventArguments) -> None:
        comment_id = e.args.get("id")
        if not isinstance(comment_id, str):
            return
        state.workshop.set_active(comment_id)
        refresh()

    ui.on("text_selected", handle_selection)
    ui.on("selection_cleared", handle_cleared)
    ui.on("annotation_clicked", handle_click)

    await ui.context.client.connected()
    client = ui.context.client

    def on_insert(record: CommentRecord) -> None:
        if state.workshop.merge_remote_insert(record):
            with client:
                refresh()

    unsubscribe = store.subscribe_inserts(piece.id, on_insert)
    client.on_disconnect(unsubscribe)

    assert state.manuscript is not None
    await ui.run_javascript(
        _selection_js(state.manuscript.id, settings.workshop.selection_debounce_ms)
    )


def _build_status_toggle(state: _PageState) -> None:
    completed = state.piece.status == "completed"

    def toggle() -> None:
        new_status = "in_review" if completed else "completed"
        state.piece = state.store.set_piece_status(state.piece.id, new_status)
        ui.navigate.reload()

    ui.button(
        "Reopen workshop" if completed else "Mark complete", on_click=toggle
    ).props("flat dense no-caps size=sm")


def _build_version_dialog_button(state: _PageState) -> None:
    """Owner-only dialog posting a revised text as the next version."""
    with ui.dialog() as dialog, ui.card().classes("w-[40rem]"):
        ui.label("New version").classes("text-h6")
        content = ui.textarea(
            "Content", value=state.piece.display_content
        ).classes("w-full")
        content.props('autogrow data-testid="version-content"')
        counter = ui.label().classes("text-caption text-grey-7")
        notes = ui.input("Version notes").classes("w-full")

        def update_count() -> None:
            counter.set_text(f"{word_count(content.value or '')} words")

        content.on_value_change(update_count)
        update_count()

        def submit() -> None:
            try:
                state.piece = state.store.add_version(
                    state.piece.id, content.value or "", notes.value or ""
                )
            except ValueError as exc:
                ui.notify(str(exc), type="warning")
                return
            dialog.close()
            ui.navigate.reload()

        with ui.row().classes("w-full justify-end gap-2"):
            ui.button("Cancel", on_click=dialog.close).props("flat")
            ui.button("Create version", on_click=submit)

    ui.button("New version", icon="call_split", on_click=dialog.open).props(
        "flat dense no-caps size=sm"
    )


def _build_version_history(state: _PageState) -> None:
    current = state.piece.current_version
    counts: dict[str | None, int] = {}
    for comment in state.workshop.comments:
        if not comment.is_reply:
            counts[comment.version_id] = counts.get(comment.version_id, 0) + 1
    with ui.expansion("Version history", icon="history").classes("w-full"):
        for version in sorted(
            state.piece.versions, key=lambda v: v.version_number, reverse=True
        ):
            with ui.row().classes("w-full items-center gap-2"):
                ui.label(f"v{version.version_number}").classes("font-bold")
                if current is not None and version.id == current.id:
                    ui.badge("Current", color="primary")
                ui.label(version.created_at.strftime("%d %b %Y")).classes(
                    "text-caption text-grey-7"
                )
                ui.label(f"{counts.get(version.id, 0)} comments").classes(
                    "text-caption text-grey-7"
                )
            if version.version_notes:
                ui.label(version.version_notes).classes("text-sm text-grey-8")
