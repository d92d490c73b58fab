"""Tag service for business logic."""

import asyncio
import sqlite3
from typing import List

from common.logging_config import get_logger
from pagevault.exceptions import (
    TagAlreadyExistsError,
    TagNotFoundError,
    UnauthorizedAccessError,
    ValidationError,
)
from pagevault.repositories.tag_repository import Tag, TagRepository
from pagevault.repositories.user_repository import User
from pagevault.services.file_service import FileService

logger = get_logger(__name__)

MAX_TAG_NAME_LENGTH = 64


def _clean_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Tag name cannot be empty")
    if len(name) > MAX_TAG_NAME_LENGTH:
        raise ValidationError(f"Tag name cannot exceed {MAX_TAG_NAME_LENGTH} characters")
    return name


class TagService:
    def __init__(self, file_service: FileService = None):
        self.tag_repo = TagRepository()
        self.file_service = file_service or FileService()

    async def list_tags(self, owner: User) -> List[Tag]:
        return await asyncio.to_thread(self.tag_repo.list_for_owner, owner.user_id)

    async def create_tag(self, owner: User, name: str) -> Tag:
        name = _clean_name(name)
        try:
            tag = await asyncio.to_thread(self.tag_repo.create_tag, owner.user_id, name)
        except sqlite3.IntegrityError:
            raise TagAlreadyExistsError(f"Tag '{name}' already exists")
        logger.info(f"Tag created: {name} [tag_id={tag.tag_id}] [owner_id={owner.user_id}]")
        return tag

    async def _get_owned_tag(self, owner: User, tag_id: int) -> Tag:
        tag = await asyncio.to_thread(self.tag_repo.get_by_id, tag_id)
        if tag is None:
            raise TagNotFoundError(f"Tag {tag_id} not found")
        if tag.owner_id != owner.user_id:
            raise UnauthorizedAccessError(f"User {owner.user_id} does not own tag {tag_id}")
        return tag

    async def rename_tag(self, owner: User, tag_id: int, name: str) -> Tag:
        tag = await self._get_owned_tag(owner, tag_id)
        name = _clean_name(name)
        try:
            await asyncio.to_thread(self.tag_repo.rename_tag, tag_id, name)
        except sqlite3.IntegrityError:
            raise TagAlreadyExistsError(f"Tag '{name}' already exists")
        return Tag(tag_id=tag.tag_id, owner_id=tag.owner_id, name=name, created_at=tag.created_at)

    async def delete_tag(self, owner: User, tag_id: int) -> None:
        await self._get_owned_tag(owner, tag_id)
        await asyncio.to_thread(self.tag_repo.delete_tag, tag_id)
        logger.info(f"Tag deleted [tag_id={tag_id}] [owner_id={owner.user_id}]")

    async def attach_tag(self, owner: User, file_id: str, tag_id: int) -> List[str]:
        """
        Attach a tag to a file. Both must belong to the caller.

        Returns:
            The file's tag names after the change
        """
        await self.file_service.get_owned_file(owner, file_id)
        await self._get_owned_tag(owner, tag_id)
        await asyncio.to_thread(self.tag_repo.attach, file_id, tag_id)
        return await asyncio.to_thread(self.tag_repo.get_tags_for_file, file_id)

    async def detach_tag(self, owner: User, file_id: str, tag_id: int) -> List[str]:
        await self.file_service.get_owned_file(owner, file_id)
        await self._get_owned_tag(owner, tag_id)
        await asyncio.to_thread(self.tag_repo.detach, file_id, tag_id)
        return await asyncio.to_thread(self.tag_repo.get_tags_for_file, file_id)
