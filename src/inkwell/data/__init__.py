"""Comment store interface and the in-memory implementation."""

from inkwell.data.memory import InMemoryCommentStore
from inkwell.data.protocol import CommentStoreProtocol

__all__ = ["CommentStoreProtocol", "InMemoryCommentStore"]
