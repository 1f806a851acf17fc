from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Chunk:
    """A piece of document text to index."""

    text: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class StoredChunk:
    id: str
    document_id: str
    text: str
    metadata: dict[str, Any] = field(default_factory=dict)
    score: float = 0.0


class BaseRagStore(ABC):
    """Contract for document history / similarity stores."""

    @abstractmethod
    def upsert_embeddings(self, document_id: str, chunks: Sequence[Chunk]) -> list[StoredChunk]:
        """Replace every stored chunk of ``document_id`` with ``chunks``."""

    @abstractmethod
    def similarity_search(self, query: str, limit: int = 5) -> list[StoredChunk]:
        """Return up to ``limit`` chunks matching ``query``, best first."""

    @abstractmethod
    def get_history(self, document_id: str) -> list[StoredChunk]:
        """Return the stored chunks of ``document_id`` in insertion order."""
