"""Seeded demo piece for the workshop page.

One writer, one invited reviewer, and a handful of comments that exercise
the overlay: an overlapping pair, a strikethrough, a resolved comment, a
legacy flat-column row and a reply.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from inkwell.data.memory import InMemoryCommentStore
from inkwell.models import (
    CommentRecord,
    PieceRecord,
    SelectionJson,
    UserRecord,
    VersionRecord,
)

logger = logging.getLogger(__name__)

DEMO_PIECE_ID = "demo-piece"

DEMO_USERS: dict[str, UserRecord] = {
    "writer": UserRecord(
        id="user-writer", email="writer@example.com", display_name="Wren"
    ),
    "reviewer": UserRecord(
        id="user-reviewer", email="Reviewer@Example.com", display_name="Rowan"
    ),
    "guest": UserRecord(id="user-guest", email="guest@example.com"),
}

DEMO_CONTENT = """The Lighthouse Keeper's Daughter

Mara had counted the steps to the lamp room so many times that the number \
had stopped meaning anything. One hundred and twelve. She climbed them \
anyway, every evening, with the oil can knocking against her knee.

The storm came in from the west that night, low and sudden, and the sea \
turned the colour of slate. Her father was asleep below. She trimmed the \
wick and watched the beam sweep out across the water, and for the first \
time she saw a boat where no boat should be.

It was very, very small and very, very far away."""


def _span(content: str, phrase: str) -> SelectionJson:
    start = content.index(phrase)
    return SelectionJson(text=phrase, start=start, end=start + len(phrase))


def seed_demo_store(store: InMemoryCommentStore) -> PieceRecord:
    """Add the demo piece and its comments to *store*."""
    piece = store.add_piece(
        PieceRecord(
            id=DEMO_PIECE_ID,
            owner_id=DEMO_USERS["writer"].id,
            title="The Lighthouse Keeper's Daughter",
            content=DEMO_CONTENT,
            reviewer_emails=["reviewer@example.com"],
            versions=[
                VersionRecord(
                    id="demo-version-1",
                    piece_id=DEMO_PIECE_ID,
                    content=DEMO_CONTENT,
                    version_notes="First draft",
                )
            ],
        )
    )
    reviewer = DEMO_USERS["reviewer"].id
    steps = _span(DEMO_CONTENT, "counted the steps to the lamp room")
    lamp = _span(DEMO_CONTENT, "the lamp room so many times")
    slate = _span(DEMO_CONTENT, "the colour of slate")
    very = _span(DEMO_CONTENT, "very, very small and very, very far away")
    boat = DEMO_CONTENT.index("a boat where no boat should be")

    seeded = [
        CommentRecord(
            id="demo-c1",
            piece_id=piece.id,
            version_id=piece.version_id,
            author_id=reviewer,
            content="Lovely opening image. The counting tells us a lot about her.",
            selection_json=steps,
        ),
        # Overlaps demo-c1; omitted from the overlay, still listed in the sidebar
        CommentRecord(
            id="demo-c2",
            piece_id=piece.id,
            version_id=piece.version_id,
            author_id=reviewer,
            content="Could this be more specific than 'so many times'?",
            selection_json=lamp,
        ),
        CommentRecord(
            id="demo-c3",
            piece_id=piece.id,
            version_id=piece.version_id,
            author_id=reviewer,
            content="Slightly familiar phrasing.",
            selection_json=slate,
            is_resolved=True,
        ),
        CommentRecord(
            id="demo-c4",
            piece_id=piece.id,
            version_id=piece.version_id,
            author_id=reviewer,
            content="Consider cutting the repetition.",
            selection_json=very.model_copy(update={"type": "strikethrough"}),
        ),
        # Row written before structured anchors existed
        CommentRecord(
            id="demo-c5",
            piece_id=piece.id,
            version_id=piece.version_id,
            author_id=reviewer,
            comment_text="This is the hook. Make sure the reader feels it.",
            selected_text="a boat where no boat should be",
            position_start=boat,
            position_end=boat + len("a boat where no boat should be"),
            comment_type="highlight",
        ),
        CommentRecord(
            id="demo-c6",
            piece_id=piece.id,
            version_id=piece.version_id,
            author_id=DEMO_USERS["writer"].id,
            content="Thanks, I was unsure about that line.",
            parent_comment_id="demo-c1",
        ),
    ]
    store.seed(seeded)
    logger.info("Seeded demo piece %s with %d comments", piece.id, len(seeded))
    return piece


@lru_cache(maxsize=1)
def get_demo_store(seed: bool = True) -> InMemoryCommentStore:
    """Process-wide store shared by every client of the demo page."""
    store = InMemoryCommentStore()
    if seed:
        seed_demo_store(store)
    return store
