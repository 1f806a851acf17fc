import threading
from collections import OrderedDict
from collections.abc import Sequence
from dataclasses import replace

from docflow.rag.base import BaseRagStore, Chunk, StoredChunk

DEFAULT_MAX_DOCUMENTS = 500


class InMemoryRagStore(BaseRagStore):
    """Keeps chunks per document and matches queries by case-insensitive substring.

    A hit scores 1 and a miss 0; misses are never returned. This is a
    placeholder until a vector store is wired in.

    At most ``max_documents`` documents are held. Upserting past the cap
    evicts the documents that were written least recently.
    """

    def __init__(self, max_documents: int = DEFAULT_MAX_DOCUMENTS) -> None:
        if max_documents < 1:
            raise ValueError("max_documents must be at least 1")
        self._max_documents = max_documents
        self._documents: OrderedDict[str, list[StoredChunk]] = OrderedDict()
        self._lock = threading.Lock()

    def upsert_embeddings(self, document_id: str, chunks: Sequence[Chunk]) -> list[StoredChunk]:
        stored = [
            StoredChunk(
                id=f"{document_id}-{index}",
                document_id=document_id,
                text=chunk.text,
                metadata=dict(chunk.metadata),
            )
            for index, chunk in enumerate(chunks)
        ]
        with self._lock:
            self._documents.pop(document_id, None)
            self._documents[document_id] = stored
            while len(self._documents) > self._max_documents:
                self._documents.popitem(last=False)
        return list(stored)

    def similarity_search(self, query: str, limit: int = 5) -> list[StoredChunk]:
        lowered = (query or "").lower()
        if not lowered:
            return []
        with self._lock:
            hits = [
                replace(item, score=1.0)
                for chunks in self._documents.values()
                for item in chunks
                if lowered in item.text.lower()
            ]
        hits.sort(key=lambda item: item.score, reverse=True)
        return hits[:limit]

    def get_history(self, document_id: str) -> list[StoredChunk]:
        with self._lock:
            return list(self._documents.get(document_id, []))
