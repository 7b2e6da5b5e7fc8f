"""Index page for Inkwell: pieces available in the workshop."""

from urllib.parse import urlencode

from nicegui import ui

from inkwell.config import get_settings
from inkwell.data.demo import DEMO_USERS, get_demo_store
from inkwell.pages.layout import demos_enabled, page_layout
from inkwell.pages.registry import page_route
from inkwell.workshop import word_count


@page_route("/", title="Home", icon="home", order=10)
async def index_page() -> None:
    """List pieces with links to open them as each demo participant."""
    with page_layout("Inkwell"):
        ui.label("Writing workshop").classes("text-2xl font-bold mb-4")
        if not demos_enabled():
            ui.label(
                "Set DEV__ENABLE_DEMO_PAGES=true to open the demo workshop."
            ).classes("text-body1 text-grey-7")
            return

        store = get_demo_store(get_settings().dev.seed_demo_piece)
        pieces = store.list_pieces()
        if not pieces:
            ui.label("No pieces yet.").classes("text-grey-6")
        for piece in pieces:
            with ui.card().classes("p-4 max-w-xl w-full"):
                ui.label(piece.title).classes("text-lg font-semibold")
                ui.label(
                    f"{word_count(piece.display_content)} words · {piece.status}"
                ).classes("text-caption text-grey-7")
                with ui.row().classes("gap-2 mt-2"):
                    for role in DEMO_USERS:
                        query = urlencode({"piece_id": piece.id, "as_user": role})
                        ui.link(f"Open as {role}", f"/workshop?{query}")
