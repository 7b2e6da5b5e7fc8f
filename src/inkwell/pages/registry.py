"""Page registration system for data-driven navigation.

Provides a decorator for registering pages with metadata, so the
navigation drawer is generated from what is registered.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from nicegui import ui

if TYPE_CHECKING:
    from collections.abc import Callable

PageCategory = Literal["main", "demo", "hidden"]


@dataclass
class PageMeta:
    """Metadata for a registered page."""

    route: str
    title: str
    icon: str
    category: PageCategory = "main"
    requires_demo: bool = False
    order: int = field(default=100)


# Global registry of all pages
_page_registry: dict[str, PageMeta] = {}


def page_route(
    route: str,
    *,
    title: str,
    icon: str,
    category: PageCategory = "main",
    requires_demo: bool = False,
    order: int = 100,
) -> Callable:
    """Decorator to register a page with navigation metadata.

    Usage:
        @page_route("/workshop", title="Workshop", icon="rate_review")
        async def workshop_page():
            ...

    Args:
        route: URL path for the page.
        title: Display title in navigation.
        icon: Material icon name.
        category: Navigation section (main, demo, hidden).
        requires_demo: Whether page requires DEV__ENABLE_DEMO_PAGES.
        order: Sort order within category (lower = higher).

    Returns:
        Decorated function registered with NiceGUI and the page registry.
    """

    def decorator(func: Callable) -> Callable:
        _page_registry[route] = PageMeta(
            route=route,
            title=title,
            icon=icon,
            category=category,
            requires_demo=requires_demo,
            order=order,
        )
        return ui.page(route)(func)

    return decorator


def get_visible_pages(demos_enabled: bool) -> list[PageMeta]:
    """Get navigable pages, sorted by category and order.

    Args:
        demos_enabled: Whether DEV__ENABLE_DEMO_PAGES is set.
    """
    visible = [
        meta
        for meta in _page_registry.values()
        if meta.category != "hidden" and (demos_enabled or not meta.requires_demo)
    ]
    category_order = {"main": 0, "demo": 1}
    visible.sort(key=lambda p: (category_order.get(p.category, 99), p.order))
    return visible
