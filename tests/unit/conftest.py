"""Shared fixtures for unit tests."""

from __future__ import annotations

import pytest

from inkwell.data.memory import InMemoryCommentStore
from inkwell.models import PieceRecord, UserRecord, VersionRecord
from tests.helpers.factories import OWNER, REVIEWER, STRANGER

CONTENT = "The quick brown fox jumps over the lazy dog."


@pytest.fixture
def owner() -> UserRecord:
    return OWNER


@pytest.fixture
def reviewer() -> UserRecord:
    return REVIEWER


@pytest.fixture
def stranger() -> UserRecord:
    return STRANGER


@pytest.fixture
def piece() -> PieceRecord:
    return PieceRecord(
        id="piece-1",
        owner_id=OWNER.id,
        title="Test piece",
        content=CONTENT,
        reviewer_emails=["reviewer@example.com"],
        versions=[VersionRecord(id="version-1", piece_id="piece-1", content=CONTENT)],
    )


@pytest.fixture
def store(piece: PieceRecord) -> InMemoryCommentStore:
    memory = InMemoryCommentStore()
    memory.add_piece(piece)
    return memory
