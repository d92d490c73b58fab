"""Qdrant-backed vector index keyed by file id."""

from typing import Any, Dict, List, Optional

from qdrant_client import AsyncQdrantClient
from qdrant_client.models import (
    Distance,
    FieldCondition,
    Filter,
    MatchValue,
    PointIdsList,
    PointStruct,
    VectorParams,
)

from common.logging_config import get_logger
from pagevault import config
from pagevault.exceptions import IndexDegradedError
from pagevault.types import VectorMatch

logger = get_logger(__name__)


class VectorIndex:
    """
    Wrapper over one Qdrant collection.

    The collection is created on first upsert with the dimension of the
    first vector seen. Entries are a cache of file text and never
    authoritative; every client failure surfaces as IndexDegradedError.
    """

    def __init__(
        self,
        client: Optional[AsyncQdrantClient] = None,
        collection_name: Optional[str] = None,
    ):
        self.client = client if client is not None else AsyncQdrantClient(
            url=config.QDRANT_URL,
            api_key=config.QDRANT_API_KEY,
            timeout=config.QDRANT_TIMEOUT_SECONDS,
        )
        self.collection_name = collection_name or config.QDRANT_COLLECTION
        self._collection_ready = False

    async def _collection_exists(self) -> bool:
        if self._collection_ready:
            return True
        exists = await self.client.collection_exists(self.collection_name)
        self._collection_ready = exists
        return exists

    async def _ensure_collection(self, dimension: int) -> None:
        if await self._collection_exists():
            return
        logger.info(f"Creating vector collection {self.collection_name} (dimension={dimension})")
        await self.client.create_collection(
            collection_name=self.collection_name,
            vectors_config=VectorParams(size=dimension, distance=Distance.COSINE),
        )
        self._collection_ready = True

    async def upsert(self, id: str, vector: List[float], metadata: Dict[str, Any]) -> None:
        try:
            await self._ensure_collection(len(vector))
            await self.client.upsert(
                collection_name=self.collection_name,
                points=[PointStruct(id=id, vector=vector, payload=metadata)],
            )
        except Exception as e:
            raise IndexDegradedError(f"Vector upsert failed for {id}: {e}") from e

    async def query(
        self,
        vector: List[float],
        top_k: int,
        owner_id: Optional[int] = None
    ) -> List[VectorMatch]:
        query_filter = None
        if owner_id is not None:
            query_filter = Filter(
                must=[FieldCondition(key="owner_id", match=MatchValue(value=owner_id))]
            )

        try:
            if not await self._collection_exists():
                return []
            response = await self.client.query_points(
                collection_name=self.collection_name,
                query=vector,
                query_filter=query_filter,
                limit=top_k,
                with_payload=False,
            )
        except Exception as e:
            raise IndexDegradedError(f"Vector query failed: {e}") from e

        return [VectorMatch(id=str(point.id), score=point.score) for point in response.points]

    async def delete_by_ids(self, ids: List[str]) -> None:
        if not ids:
            return
        try:
            if not await self._collection_exists():
                return
            await self.client.delete(
                collection_name=self.collection_name,
                points_selector=PointIdsList(points=ids),
            )
        except Exception as e:
            raise IndexDegradedError(f"Vector delete failed: {e}") from e

    async def close(self) -> None:
        await self.client.close()
