"""Share link service."""

import asyncio
import secrets
import sqlite3
from typing import Optional, Tuple

from common.logging_config import get_logger
from pagevault.exceptions import ShareNotFoundError
from pagevault.repositories.file_repository import File, FileRepository
from pagevault.repositories.share_repository import Share, ShareRepository
from pagevault.repositories.user_repository import User
from pagevault.services.file_service import FileService

logger = get_logger(__name__)


def generate_share_id() -> str:
    return secrets.token_urlsafe(12)


class ShareService:
    def __init__(self, file_service: FileService = None):
        self.share_repo = ShareRepository()
        self.file_repo = FileRepository()
        self.file_service = file_service or FileService()

    async def set_share(self, owner: User, file_id: str, enable: Optional[bool] = None) -> Share:
        """
        Create a file's share link or toggle it.

        With enable=None an existing share is flipped and a missing one is
        created enabled. Disabling keeps the row, so re-enabling reuses the
        same share id and visit count.
        """
        await self.file_service.get_owned_file(owner, file_id)

        share = await asyncio.to_thread(self.share_repo.get_by_file, file_id)
        if share is None:
            if enable is False:
                raise ShareNotFoundError(f"File {file_id} has no share link")
            try:
                share = await asyncio.to_thread(self.share_repo.create_share, generate_share_id(), file_id)
            except sqlite3.IntegrityError:
                share = await asyncio.to_thread(self.share_repo.get_by_file, file_id)
            logger.info(f"Share created [share_id={share.share_id}] [file_id={file_id}]")
            return share

        target = (not share.is_enabled) if enable is None else enable
        if target != share.is_enabled:
            await asyncio.to_thread(self.share_repo.set_enabled, file_id, target)
            logger.info(f"Share {'enabled' if target else 'disabled'} [share_id={share.share_id}] [file_id={file_id}]")
        return await asyncio.to_thread(self.share_repo.get_by_file, file_id)

    async def get_share(self, owner: User, file_id: str) -> Optional[Share]:
        await self.file_service.get_owned_file(owner, file_id)
        return await asyncio.to_thread(self.share_repo.get_by_file, file_id)

    async def resolve(self, share_id: str) -> Tuple[Share, File]:
        """
        Resolve a public share id to its enabled share and file.

        Raises:
            ShareNotFoundError: Unknown id, disabled share or deleted file
        """
        share = await asyncio.to_thread(self.share_repo.get_by_share_id, share_id)
        if share is None or not share.is_enabled:
            raise ShareNotFoundError(f"Share {share_id} not found")
        file = await asyncio.to_thread(self.file_repo.get_by_id, share.file_id)
        if file is None:
            raise ShareNotFoundError(f"Share {share_id} not found")
        return share, file

    async def open_raw(self, share_id: str) -> Tuple[File, bytes]:
        """
        Read shared content and count the visit.
        """
        share, file = await self.resolve(share_id)
        data = await self.file_service.read_object(file)
        await asyncio.to_thread(self.share_repo.increment_visits, share.share_id)
        return file, data
