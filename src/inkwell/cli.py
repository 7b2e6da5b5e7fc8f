"""Command-line utilities for Inkwell.

``inkwell-preview`` renders a manuscript and its comments as the overlay
the workshop page would show, in the terminal.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field, ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from inkwell.input_pipeline import (
    ContentType,
    detect_content_type,
    prepare_manuscript,
)
from inkwell.models import CommentRecord
from inkwell.overlay import HighlightSegment, render_segments, segments_to_html

if TYPE_CHECKING:
    import argparse

    from inkwell.overlay import Annotation, Segment

console = Console()

# Terminal styles mirroring static/workshop.css
_STYLES = {
    "annotation": "black on yellow",
    "annotation-resolved": "dim underline",
    "annotation-selected": "bold black on dark_orange",
    "annotation-draft": "black on light_sky_blue1",
}


def _build_preview_parser() -> argparse.ArgumentParser:
    import argparse

    parser = argparse.ArgumentParser(
        prog="inkwell-preview",
        description="Render a manuscript with its comment overlay.",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "path",
        nargs="?",
        type=Path,
        help='JSON file: {"content": str, "source_type"?: "html"|"text", '
        '"comments": [...]}; source_type is detected when omitted',
    )
    source.add_argument(
        "--demo", action="store_true", help="Preview the seeded demo piece"
    )
    parser.add_argument("--active", help="Comment id to render as selected")
    parser.add_argument(
        "--html", action="store_true", help="Print overlay HTML instead of text"
    )
    return parser


def segment_text(segments: list[Segment]) -> Text:
    """Build a rich Text with one styled span per highlight segment."""
    text = Text()
    for segment in segments:
        if isinstance(segment, HighlightSegment):
            style = _STYLES.get(segment.css_class.split()[0], "reverse")
            if segment.kind == "strikethrough":
                style = f"{style} strike"
            text.append(segment.text, style=style)
        else:
            text.append(segment.text)
    return text


def _annotation_table(
    annotations: list[Annotation], segments: list[Segment]
) -> Table:
    shown = {s.annotation_id for s in segments if isinstance(s, HighlightSegment)}
    table = Table(title="Annotations")
    table.add_column("id")
    table.add_column("span", justify="right")
    table.add_column("kind")
    table.add_column("overlay")
    for annotation in sorted(annotations, key=lambda a: (a.start, a.end)):
        status = (
            Text("shown", style="green")
            if annotation.id in shown
            else Text("omitted", style="yellow")
        )
        table.add_row(
            annotation.id,
            f"{annotation.start}-{annotation.end}",
            annotation.kind,
            status,
        )
    return table


class PreviewPayload(BaseModel):
    """Input file for ``inkwell-preview``."""

    content: str = ""
    source_type: ContentType | None = None
    comments: list[CommentRecord] = Field(default_factory=list)


def _load_payload(path: Path) -> tuple[str, list[CommentRecord]]:
    payload = PreviewPayload.model_validate_json(path.read_text(encoding="utf-8"))
    source_type = payload.source_type or detect_content_type(payload.content)
    return prepare_manuscript(payload.content, source_type), payload.comments


def _load_demo() -> tuple[str, list[CommentRecord]]:
    import asyncio

    from inkwell.data.demo import DEMO_PIECE_ID, get_demo_store

    store = get_demo_store()
    piece = store.get_piece(DEMO_PIECE_ID)
    assert piece is not None
    return piece.display_content, asyncio.run(store.list_comments(piece.id))


def preview(argv: list[str] | None = None) -> None:
    """Render a manuscript and its comments as overlay segments.

    Usage:
        inkwell-preview piece.json [--active COMMENT_ID] [--html]
        inkwell-preview --demo
    """
    args = _build_preview_parser().parse_args(
        sys.argv[1:] if argv is None else argv
    )

    try:
        content, comments = _load_demo() if args.demo else _load_payload(args.path)
    except FileNotFoundError:
        console.print(f"[red]Error:[/] File not found: {escape(str(args.path))}")
        sys.exit(1)
    except ValidationError as exc:
        console.print(f"[red]Error:[/] Invalid input: {escape(str(exc))}")
        sys.exit(1)

    annotations = [a for c in comments if (a := c.to_annotation()) is not None]
    segments = render_segments(content, annotations, active_id=args.active)

    if args.html:
        console.print(
            segments_to_html(segments), markup=False, highlight=False, soft_wrap=True
        )
        return

    console.print(Panel(segment_text(segments), title="Manuscript", expand=False))
    if annotations:
        console.print(_annotation_table(annotations, segments))
