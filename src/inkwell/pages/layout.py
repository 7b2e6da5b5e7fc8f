"""Shared layout components for Inkwell.

Provides consistent header, navigation drawer, and page structure.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

from nicegui import ui

from inkwell.config import get_settings
from inkwell.pages.registry import get_visible_pages

if TYPE_CHECKING:
    from collections.abc import Iterator


def demos_enabled() -> bool:
    """True if DEV__ENABLE_DEMO_PAGES is set to true."""
    return get_settings().dev.enable_demo_pages


def require_demo_enabled() -> bool:
    """Check if demos are enabled, show error if not.

    Use at the start of demo pages to gate access.
    """
    if demos_enabled():
        return True
    ui.label("Demo pages are disabled").classes("text-h5 text-red-500")
    ui.label("Set DEV__ENABLE_DEMO_PAGES=true in your environment to enable.").classes(
        "text-body1 text-grey-7"
    )
    ui.button("Go Home", on_click=lambda: ui.navigate.to("/")).classes("mt-4")
    return False


def _nav_item(label: str, route: str, icon: str | None = None) -> None:
    with ui.item(on_click=lambda: ui.navigate.to(route)).classes("w-full"):
        if icon:
            with ui.item_section().props("avatar"):
                ui.icon(icon)
        with ui.item_section():
            ui.item_label(label)


@contextmanager
def page_layout(title: str = "Inkwell", subtitle: str = "") -> Iterator[None]:
    """Context manager for page layout with header and nav drawer.

    Usage:
        @page_route("/my-page", title="My Page", icon="home")
        async def my_page():
            with page_layout("My Page"):
                ui.label("Page content here")
    """
    with ui.header().classes("bg-stone-800 items-center q-py-xs"):
        menu_btn = ui.button(icon="menu").props("flat color=white")
        ui.label(title).classes("text-h6 text-white q-ml-sm")
        ui.element("div").classes("flex-grow")
        if subtitle:
            ui.label(subtitle).classes("text-white text-body2 q-mr-md")

    with ui.left_drawer(value=False).classes("bg-grey-2") as drawer:
        ui.label("Navigation").classes("text-h6 q-pa-md")
        ui.separator()
        with ui.list().props("padding"):
            for page in get_visible_pages(demos_enabled()):
                _nav_item(page.title, page.route, page.icon)

    menu_btn.on("click", drawer.toggle)

    with ui.element("div").classes("q-pa-md w-full"):
        yield
