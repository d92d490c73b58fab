"""Search query planning across the metadata and vector indexes."""

import asyncio
from typing import List, Optional

from common.constants import SEARCH_MODE_VECTOR, SEARCH_MODES
from common.logging_config import get_logger
from pagevault import config, service_locator
from pagevault.exceptions import IndexDegradedError, ValidationError
from pagevault.repositories.file_repository import File, FileRepository
from pagevault.repositories.tag_repository import TagRepository
from pagevault.repositories.user_repository import User
from pagevault.services.file_service import to_metadata
from pagevault.types import SearchResult, VectorMatch
from pagevault.utils import make_snippet

logger = get_logger(__name__)


class SearchService:
    def __init__(self, embedding_client=None, vector_index=None):
        self.file_repo = FileRepository()
        self.tag_repo = TagRepository()
        self.embedding_client = embedding_client or service_locator.get_embedding_client()
        self.vector_index = vector_index or service_locator.get_vector_index()

    @property
    def vector_enabled(self) -> bool:
        return self.embedding_client is not None and self.vector_index is not None

    async def search(
        self,
        owner: User,
        query: Optional[str] = None,
        mode: str = SEARCH_MODE_VECTOR,
        tag: Optional[str] = None
    ) -> List[SearchResult]:
        """
        Search the owner's files.

        A blank query lists the owner's files newest first. Vector mode falls
        back to metadata search when the backends are absent, fail or find
        nothing; the caller never sees the degradation.

        Raises:
            ValidationError: Unknown mode
        """
        mode = (mode or SEARCH_MODE_VECTOR).lower()
        if mode not in SEARCH_MODES:
            raise ValidationError(f"Unknown search mode '{mode}' (expected one of: {', '.join(SEARCH_MODES)})")

        tag = tag.strip() if tag else None
        term = query.strip() if query else ""

        if not term:
            files = await asyncio.to_thread(self.file_repo.list_by_owner, owner.user_id, tag)
            return await self._with_tags([(file, None, None) for file in files])

        if mode == SEARCH_MODE_VECTOR and self.vector_enabled:
            results = await self._vector_search(owner, term, tag)
            if results:
                return results
            logger.info(f"Vector search found nothing, falling back to metadata [owner_id={owner.user_id}]")

        return await self._metadata_search(owner, term, tag)

    async def _vector_search(self, owner: User, term: str, tag: Optional[str]) -> List[SearchResult]:
        try:
            vector = await self.embedding_client.embed(term)
            matches: List[VectorMatch] = await self.vector_index.query(
                vector, config.VECTOR_TOP_K, owner_id=owner.user_id
            )
        except IndexDegradedError as e:
            logger.warning(f"Vector search degraded, using metadata search [owner_id={owner.user_id}]: {e}")
            return []

        if not matches:
            return []

        records = await asyncio.to_thread(
            self.file_repo.get_by_ids, [match.id for match in matches], owner.user_id, tag
        )
        ranked = [
            (records[match.id], make_snippet(records[match.id].text, term, config.SNIPPET_RADIUS), match.score)
            for match in matches
            if match.id in records
        ]
        return await self._with_tags(ranked)

    async def _metadata_search(self, owner: User, term: str, tag: Optional[str]) -> List[SearchResult]:
        files = await asyncio.to_thread(self.file_repo.search_metadata, owner.user_id, term, tag)
        return await self._with_tags([(file, self._lexical_snippet(file, term), None) for file in files])

    @staticmethod
    def _lexical_snippet(file: File, term: str) -> Optional[str]:
        for source in (file.description, file.text):
            if source and term.lower() in source.lower():
                return make_snippet(source, term, config.SNIPPET_RADIUS)
        return None

    async def _with_tags(self, rows) -> List[SearchResult]:
        tags = await asyncio.to_thread(self.tag_repo.get_tags_for_files, [file.file_id for file, _, _ in rows])
        return [
            SearchResult(file=to_metadata(file, tags.get(file.file_id, [])), snippet=snippet, score=score)
            for file, snippet, score in rows
        ]
