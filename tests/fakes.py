"""In-memory doubles for the object store, embedder and vector index."""

import math
import re
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pagevault.exceptions import IndexDegradedError, StorageError
from pagevault.repositories.user_repository import User, UserRepository
from pagevault.types import ListedObject, ObjectPage, StoredObject, VectorMatch


class InMemoryObjectStore:
    """
    Dict-backed stand-in for ObjectStore with the same method contract.

    Keys listed in fail_keys raise StorageError on any access.
    """

    def __init__(self):
        self.objects: Dict[str, StoredObject] = {}
        self.fail_keys = set()
        self.fail_listing = False
        self.deleted: List[str] = []

    def _check(self, key: str) -> None:
        if key in self.fail_keys:
            raise StorageError(f"Simulated failure for {key}")

    def put(self, key, data, content_type, custom_metadata=None):
        self._check(key)
        self.objects[key] = StoredObject(
            key=key,
            data=data,
            size=len(data),
            content_type=content_type,
            custom_metadata=dict(custom_metadata or {}),
        )

    def get(self, key):
        self._check(key)
        return self.objects.get(key)

    def get_range(self, key, max_bytes):
        self._check(key)
        stored = self.objects.get(key)
        if stored is None:
            return None
        return StoredObject(
            key=key,
            data=stored.data[:max_bytes],
            size=stored.size,
            content_type=stored.content_type,
            custom_metadata=dict(stored.custom_metadata),
        )

    def head(self, key):
        self._check(key)
        stored = self.objects.get(key)
        if stored is None:
            return None
        return StoredObject(
            key=key,
            data=b"",
            size=stored.size,
            content_type=stored.content_type,
            custom_metadata=dict(stored.custom_metadata),
        )

    def delete(self, key):
        self._check(key)
        self.objects.pop(key, None)
        self.deleted.append(key)

    def copy(self, src, dst, custom_metadata=None, content_type=None):
        self._check(src)
        source = self.objects[src]
        self.objects[dst] = StoredObject(
            key=dst,
            data=source.data,
            size=source.size,
            content_type=content_type or source.content_type,
            custom_metadata=dict(custom_metadata if custom_metadata is not None else source.custom_metadata),
        )

    def list_objects(self, cursor=None, page_size=500):
        if self.fail_listing:
            raise StorageError("Simulated listing failure")
        keys = sorted(self.objects)
        start = int(cursor) if cursor else 0
        chunk = keys[start:start + page_size]
        truncated = start + page_size < len(keys)
        return ObjectPage(
            objects=[ListedObject(key=k, size=self.objects[k].size) for k in chunk],
            next_cursor=str(start + page_size) if truncated else None,
            truncated=truncated,
        )

_WORD = re.compile(r"[a-z0-9]+")


class FakeEmbeddingClient:
    """
    Bag-of-words embedder over a fixed vocabulary; unknown words are ignored.
    """

    def __init__(self, vocabulary: List[str], fail: bool = False):
        self.vocabulary = vocabulary
        self.fail = fail
        self.calls: List[str] = []

    async def embed(self, text: str) -> List[float]:
        self.calls.append(text)
        if self.fail:
            raise IndexDegradedError("Simulated embedding outage")
        words = _WORD.findall(text.lower())
        vector = [float(words.count(term)) for term in self.vocabulary]
        if not any(vector):
            vector[0] = 0.001
        return vector

    async def close(self):
        pass


class FakeVectorIndex:
    """In-memory cosine index honoring the owner_id payload filter."""

    def __init__(self, fail_query: bool = False):
        self.entries: Dict[str, tuple] = {}
        self.fail_query = fail_query

    async def upsert(self, id, vector, metadata):
        self.entries[id] = (vector, dict(metadata))

    async def query(self, vector, top_k, owner_id: Optional[int] = None):
        if self.fail_query:
            raise IndexDegradedError("Simulated vector outage")
        scored = []
        for entry_id, (stored, payload) in self.entries.items():
            if owner_id is not None and payload.get("owner_id") != owner_id:
                continue
            score = _cosine(vector, stored)
            if score > 0:
                scored.append(VectorMatch(id=entry_id, score=score))
        scored.sort(key=lambda m: m.score, reverse=True)
        return scored[:top_k]

    async def delete_by_ids(self, ids):
        for entry_id in ids:
            self.entries.pop(entry_id, None)

    async def close(self):
        pass


def _cosine(a, b) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return dot / norm if norm else 0.0


def make_user(username: str, role: str = "user", storage_limit: int = 1024 * 1024, **kwargs) -> User:
    return UserRepository.create_user(
        username=username,
        api_key=f"pv_{username}-key",
        storage_limit=storage_limit,
        created_at=datetime.now(timezone.utc),
        role=role,
        **kwargs,
    )
