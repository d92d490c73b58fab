"""File service for business logic."""

import asyncio
from typing import List, Optional, Tuple

from common.constants import MAX_UPLOAD_BYTES, ORIGINAL_FILENAME_METADATA_KEY
from common.logging_config import get_logger
from common.types import ContentKind, file_extension, is_supported_filename
from pagevault import service_locator
from pagevault.exceptions import (
    FileNotFoundError,
    QuotaExceededError,
    StorageError,
    ValidationError,
)
from pagevault.extractor import extract_title_and_text
from pagevault.repositories.file_repository import File, FileRepository
from pagevault.repositories.tag_repository import TagRepository
from pagevault.repositories.user_repository import User
from pagevault.services.index_service import IndexService
from pagevault.types import FileMetadata
from pagevault.utils import generate_uuid

logger = get_logger(__name__)


def to_metadata(file: File, tags: List[str]) -> FileMetadata:
    return FileMetadata(
        file_id=file.file_id,
        owner_id=file.owner_id,
        object_key=file.object_key,
        filename=file.filename,
        display_name=file.display_name,
        content_kind=ContentKind(file.content_kind),
        content_type=file.content_type,
        size=file.size,
        description=file.description,
        tags=tags,
        created_at=file.created_at,
        updated_at=file.updated_at,
        has_text=bool(file.text),
    )


class FileService:
    def __init__(self, object_store=None, index_service: Optional[IndexService] = None, indexing_queue=None):
        self.file_repo = FileRepository()
        self.tag_repo = TagRepository()
        self.object_store = object_store or service_locator.get_object_store()
        self.index_service = index_service or IndexService(object_store=self.object_store)
        self.indexing_queue = indexing_queue or service_locator.get_indexing_queue()

    async def upload_file(self, owner: User, filename: str, data: bytes) -> FileMetadata:
        """
        Store a new document and register it.

        Re-uploading an existing filename always creates a new record.

        Raises:
            ValidationError: Unsupported extension, empty or oversized data
            QuotaExceededError: The upload would exceed the owner's storage limit
            StorageError: The object write failed
        """
        filename = (filename or "").strip()
        if not filename or not is_supported_filename(filename):
            raise ValidationError("Only .html, .htm, .md and .markdown files are supported")
        if not data:
            raise ValidationError("File is empty")
        if len(data) > MAX_UPLOAD_BYTES:
            raise ValidationError(f"File exceeds the {MAX_UPLOAD_BYTES // (1024 * 1024)}MB upload limit")

        size = len(data)
        used, _ = await asyncio.to_thread(self.file_repo.get_usage, owner.user_id)
        if used + size > owner.storage_limit:
            raise QuotaExceededError(
                f"Storage quota exceeded: {used + size} bytes would exceed limit of {owner.storage_limit}"
            )

        kind = ContentKind.from_filename(filename)
        extension = file_extension(filename, default="html")
        object_key = f"{owner.user_id}/{generate_uuid()}.{extension}"
        extraction = extract_title_and_text(data, kind, filename)

        await asyncio.to_thread(
            self.object_store.put,
            object_key,
            data,
            kind.content_type,
            {ORIGINAL_FILENAME_METADATA_KEY: filename},
        )

        try:
            file = await self.register_file(
                owner_id=owner.user_id,
                object_key=object_key,
                filename=filename,
                display_name=extraction.title or filename,
                kind=kind,
                size=size,
                text=extraction.text,
                enqueue_index=False,
            )
        except Exception as e:
            logger.error(f"Upload registration failed [object_key={object_key}]: {e}")
            await self._delete_object_with_retry(object_key)
            raise

        used_after, _ = await asyncio.to_thread(self.file_repo.get_usage, owner.user_id)
        if used_after > owner.storage_limit:
            logger.warning(
                f"Concurrent upload pushed usage over quota, rolling back [file_id={file.file_id}] "
                f"[owner_id={owner.user_id}]"
            )
            await asyncio.to_thread(self.file_repo.delete_file, file.file_id)
            await self._delete_object_with_retry(object_key)
            raise QuotaExceededError(
                f"Storage quota exceeded: {used_after} bytes would exceed limit of {owner.storage_limit}"
            )

        self._enqueue_index(file.file_id)
        logger.info(f"Uploaded file {filename} [file_id={file.file_id}] [owner_id={owner.user_id}] size={size}")
        return to_metadata(file, [])

    async def register_file(
        self,
        owner_id: int,
        object_key: str,
        filename: str,
        display_name: str,
        kind: ContentKind,
        size: int,
        text: Optional[str],
        description: Optional[str] = None,
        enqueue_index: bool = True,
    ) -> File:
        """
        Insert the metadata record for a stored object, then enqueue its indexing.

        Shared by uploads and reconciliation. Raises sqlite3.IntegrityError
        when the object key already has a record.
        """
        file = await asyncio.to_thread(
            self.file_repo.create_file,
            generate_uuid(),
            owner_id,
            object_key,
            filename,
            display_name,
            kind.value,
            kind.content_type,
            size,
            text,
            description,
        )
        if enqueue_index:
            self._enqueue_index(file.file_id)
        return file

    def _enqueue_index(self, file_id: str) -> None:
        if not self.index_service.vector_enabled:
            return
        self.indexing_queue.enqueue(self.index_service.index_file(file_id), f"index file {file_id}")

    async def _delete_object_with_retry(self, object_key: str, max_attempts: int = 3) -> bool:
        """
        Delete an object with exponential backoff.

        Returns:
            True if deleted; False leaves the object for the next reconciliation sweep
        """
        for attempt in range(max_attempts):
            try:
                await asyncio.to_thread(self.object_store.delete, object_key)
                logger.info(f"Deleted object [object_key={object_key}]")
                return True
            except StorageError as e:
                if attempt < max_attempts - 1:
                    delay = 2 ** attempt
                    logger.warning(f"Failed to delete object {object_key}, retrying in {delay}s: {e}")
                    await asyncio.sleep(delay)
                else:
                    logger.error(f"Failed to delete object {object_key} after {max_attempts} attempts: {e}")
        return False

    async def get_owned_file(self, owner: User, file_id: str) -> File:
        """
        Load a file the caller owns. Another user's file is reported as missing.
        """
        file = await asyncio.to_thread(self.file_repo.get_by_id, file_id)
        if file is None or file.owner_id != owner.user_id:
            raise FileNotFoundError(f"File {file_id} not found")
        return file

    async def get_file_metadata(self, owner: User, file_id: str) -> FileMetadata:
        file = await self.get_owned_file(owner, file_id)
        tags = await asyncio.to_thread(self.tag_repo.get_tags_for_file, file_id)
        return to_metadata(file, tags)

    async def read_content(self, owner: User, file_id: str) -> Tuple[File, bytes]:
        file = await self.get_owned_file(owner, file_id)
        return file, await self.read_object(file)

    async def read_object(self, file: File) -> bytes:
        stored = await asyncio.to_thread(self.object_store.get, file.object_key)
        if stored is None:
            logger.error(f"Object missing for file [file_id={file.file_id}] [object_key={file.object_key}]")
            raise FileNotFoundError(f"Content for file {file.file_id} not found")
        return stored.data

    async def update_file(
        self,
        owner: User,
        file_id: str,
        display_name: Optional[str] = None,
        description: Optional[str] = None
    ) -> FileMetadata:
        await self.get_owned_file(owner, file_id)

        if display_name is not None:
            display_name = display_name.strip()
            if not display_name:
                raise ValidationError("Display name cannot be empty")

        await asyncio.to_thread(self.file_repo.update_details, file_id, display_name, description)
        if display_name is not None:
            self._enqueue_index(file_id)
        return await self.get_file_metadata(owner, file_id)

    async def delete_file(self, owner: User, file_id: str) -> None:
        """
        Delete the object, then the record, then the vector entry (best effort).

        The object goes first so a failed delete never leaves an unrecorded
        owner-scoped object for the next sweep to resurrect.
        """
        file = await self.get_owned_file(owner, file_id)

        await asyncio.to_thread(self.object_store.delete, file.object_key)
        await asyncio.to_thread(self.file_repo.delete_file, file_id)
        await self.index_service.remove_file(file_id)
        logger.info(f"Deleted file [file_id={file_id}] [owner_id={owner.user_id}]")

    async def get_usage(self, owner: User) -> Tuple[int, int]:
        return await asyncio.to_thread(self.file_repo.get_usage, owner.user_id)
