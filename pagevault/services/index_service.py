"""Vector indexing and reindex backlog processing."""

import asyncio
from typing import Optional

from common.logging_config import get_logger
from common.types import ContentKind
from pagevault import config, service_locator
from pagevault.exceptions import IndexDegradedError, StorageError
from pagevault.extractor import extract_title_and_text
from pagevault.repositories.file_repository import File, FileRepository
from pagevault.utils import get_current_timestamp

logger = get_logger(__name__)


class IndexService:
    def __init__(self, object_store=None, embedding_client=None, vector_index=None):
        self.file_repo = FileRepository()
        self.object_store = object_store or service_locator.get_object_store()
        self.embedding_client = embedding_client or service_locator.get_embedding_client()
        self.vector_index = vector_index or service_locator.get_vector_index()

    @property
    def vector_enabled(self) -> bool:
        return self.embedding_client is not None and self.vector_index is not None

    async def index_file(self, file_id: str) -> bool:
        """
        Embed a file's text and write its vector entry.

        Returns:
            True if the entry was written, False if skipped or the backends failed
        """
        if not self.vector_enabled:
            return False

        file = await asyncio.to_thread(self.file_repo.get_by_id, file_id)
        if file is None:
            logger.debug(f"Skipping index of deleted file [file_id={file_id}]")
            return False

        return await self._index_record(file)

    async def _index_record(self, file: File) -> bool:
        if not self.vector_enabled or not file.text:
            return False

        started_at = get_current_timestamp()
        try:
            vector = await self.embedding_client.embed(f"{file.display_name}\n{file.text}")
            await self.vector_index.upsert(
                file.file_id,
                vector,
                {"owner_id": file.owner_id, "display_name": file.display_name},
            )
        except IndexDegradedError as e:
            logger.warning(f"Vector indexing failed [file_id={file.file_id}]: {e}")
            return False

        await asyncio.to_thread(self.file_repo.mark_vector_indexed, file.file_id, started_at)
        logger.debug(f"Vector entry written [file_id={file.file_id}]")
        return True

    async def remove_file(self, file_id: str) -> None:
        if self.vector_index is None:
            return
        try:
            await self.vector_index.delete_by_ids([file_id])
        except IndexDegradedError as e:
            logger.warning(f"Vector entry removal failed [file_id={file_id}]: {e}")

    async def reindex_batch(self, limit: Optional[int] = None) -> int:
        """
        Process up to limit backlog files.

        Files missing text are extracted first and then embedded. Any budget
        left goes to files that hold text but lack a current vector entry;
        those are only re-embedded, never re-extracted.

        A missing object marks the file extracted with empty text so it leaves
        the backlog. A transient object store error leaves it queued, and so
        does a failed embedding.

        Args:
            limit: Maximum files to process (default REINDEX_BATCH_SIZE)

        Returns:
            Number of files taken out of the backlog
        """
        limit = limit or config.REINDEX_BATCH_SIZE
        files = await asyncio.to_thread(self.file_repo.get_files_missing_text, limit)
        processed = 0
        if files:
            logger.info(f"Reindexing {len(files)} files missing text")

        for file in files:
            try:
                stored = await asyncio.to_thread(
                    self.object_store.get_range, file.object_key, config.HTML_INPUT_LIMIT
                )
            except StorageError as e:
                logger.warning(f"Reindex read failed, leaving in backlog [file_id={file.file_id}]: {e}")
                continue

            if stored is None:
                logger.warning(f"Object missing for file, marking extracted [file_id={file.file_id}] "
                               f"[object_key={file.object_key}]")
                await asyncio.to_thread(self.file_repo.update_file_text, file.file_id, "")
                processed += 1
                continue

            extraction = extract_title_and_text(
                stored.data, ContentKind(file.content_kind), file.filename
            )
            title = extraction.title if file.display_name == file.filename else None

            await asyncio.to_thread(
                self.file_repo.update_file_text, file.file_id, extraction.text, title
            )
            processed += 1

            refreshed = await asyncio.to_thread(self.file_repo.get_by_id, file.file_id)
            if refreshed is not None:
                await self._index_record(refreshed)

        if self.vector_enabled and len(files) < limit:
            processed += await self._reembed_stale(limit - len(files), {f.file_id for f in files})

        if files or processed:
            logger.info(f"Reindex batch complete: {processed} files processed")
        return processed

    async def _reembed_stale(self, limit: int, attempted: set) -> int:
        stale = await asyncio.to_thread(self.file_repo.get_files_missing_vector, limit + len(attempted))
        stale = [f for f in stale if f.file_id not in attempted][:limit]
        if not stale:
            return 0

        logger.info(f"Re-embedding {len(stale)} files without a vector entry")
        written = 0
        for file in stale:
            if await self._index_record(file):
                written += 1
        return written
