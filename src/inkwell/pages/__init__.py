"""NiceGUI pages for Inkwell.

Import this module to register all page routes with NiceGUI.
"""

from inkwell.pages import index, workshop

__all__ = ["index", "workshop"]

# Touch modules to prevent linter from removing "unused" imports.
# These imports register @ui.page decorators as a side effect.
_PAGES = (index, workshop)
