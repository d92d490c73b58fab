"""Tests for TagService and ShareService."""

import pytest

from pagevault.exceptions import (
    FileNotFoundError,
    ShareNotFoundError,
    TagAlreadyExistsError,
    TagNotFoundError,
    UnauthorizedAccessError,
    ValidationError,
)
from pagevault.services.file_service import FileService
from pagevault.services.share_service import ShareService
from pagevault.services.tag_service import TagService
from tests.fakes import make_user


@pytest.fixture
def file_service(object_store):
    return FileService(object_store=object_store)


class TestTagService:
    @pytest.mark.asyncio
    async def test_create_list_rename_delete(self, owner, file_service):
        service = TagService(file_service)

        work = await service.create_tag(owner, "  work ")
        await service.create_tag(owner, "archive")
        assert [t.name for t in await service.list_tags(owner)] == ["archive", "work"]

        renamed = await service.rename_tag(owner, work.tag_id, "job")
        assert renamed.name == "job"

        await service.delete_tag(owner, work.tag_id)
        assert [t.name for t in await service.list_tags(owner)] == ["archive"]

    @pytest.mark.asyncio
    async def test_duplicate_and_invalid_names(self, owner, file_service):
        service = TagService(file_service)
        await service.create_tag(owner, "work")
        other = await service.create_tag(owner, "home")

        with pytest.raises(TagAlreadyExistsError):
            await service.create_tag(owner, "work")
        with pytest.raises(TagAlreadyExistsError):
            await service.rename_tag(owner, other.tag_id, "work")
        with pytest.raises(ValidationError):
            await service.create_tag(owner, "   ")
        with pytest.raises(ValidationError):
            await service.create_tag(owner, "x" * 65)

    @pytest.mark.asyncio
    async def test_attach_and_detach(self, owner, file_service):
        service = TagService(file_service)
        metadata = await file_service.upload_file(owner, "a.md", b"# A")
        tag = await service.create_tag(owner, "work")

        assert await service.attach_tag(owner, metadata.file_id, tag.tag_id) == ["work"]
        assert (await file_service.get_file_metadata(owner, metadata.file_id)).tags == ["work"]
        assert await service.detach_tag(owner, metadata.file_id, tag.tag_id) == []

    @pytest.mark.asyncio
    async def test_cross_owner_access(self, owner, file_service):
        service = TagService(file_service)
        intruder = make_user("intruder")
        metadata = await file_service.upload_file(owner, "a.md", b"# A")
        their_tag = await service.create_tag(intruder, "theirs")
        my_tag = await service.create_tag(owner, "mine")

        with pytest.raises(UnauthorizedAccessError):
            await service.attach_tag(owner, metadata.file_id, their_tag.tag_id)
        with pytest.raises(FileNotFoundError):
            await service.attach_tag(intruder, metadata.file_id, their_tag.tag_id)
        with pytest.raises(UnauthorizedAccessError):
            await service.delete_tag(intruder, my_tag.tag_id)
        with pytest.raises(TagNotFoundError):
            await service.delete_tag(owner, 9999)


class TestShareService:
    @pytest.mark.asyncio
    async def test_toggle_keeps_share_id(self, owner, file_service):
        service = ShareService(file_service)
        metadata = await file_service.upload_file(owner, "s.md", b"# Shared")

        created = await service.set_share(owner, metadata.file_id)
        assert created.is_enabled

        disabled = await service.set_share(owner, metadata.file_id)
        assert not disabled.is_enabled
        assert disabled.share_id == created.share_id

        enabled = await service.set_share(owner, metadata.file_id, enable=True)
        assert enabled.is_enabled
        assert enabled.share_id == created.share_id

        unchanged = await service.set_share(owner, metadata.file_id, enable=True)
        assert unchanged.is_enabled

    @pytest.mark.asyncio
    async def test_disable_missing_share(self, owner, file_service):
        service = ShareService(file_service)
        metadata = await file_service.upload_file(owner, "s.md", b"# Shared")

        with pytest.raises(ShareNotFoundError):
            await service.set_share(owner, metadata.file_id, enable=False)

    @pytest.mark.asyncio
    async def test_open_raw_counts_visits_and_respects_disable(self, owner, file_service):
        service = ShareService(file_service)
        metadata = await file_service.upload_file(owner, "s.md", b"# Shared")
        share = await service.set_share(owner, metadata.file_id, enable=True)

        file, data = await service.open_raw(share.share_id)
        await service.open_raw(share.share_id)

        assert data == b"# Shared"
        assert file.file_id == metadata.file_id
        assert (await service.get_share(owner, metadata.file_id)).visit_count == 2

        await service.set_share(owner, metadata.file_id, enable=False)
        with pytest.raises(ShareNotFoundError):
            await service.resolve(share.share_id)

    @pytest.mark.asyncio
    async def test_share_gone_with_file(self, owner, file_service):
        service = ShareService(file_service)
        metadata = await file_service.upload_file(owner, "s.md", b"# Shared")
        share = await service.set_share(owner, metadata.file_id)

        await file_service.delete_file(owner, metadata.file_id)

        with pytest.raises(ShareNotFoundError):
            await service.resolve(share.share_id)

    @pytest.mark.asyncio
    async def test_other_owner_cannot_share(self, owner, file_service):
        service = ShareService(file_service)
        metadata = await file_service.upload_file(owner, "s.md", b"# Shared")
        intruder = make_user("sharer")

        with pytest.raises(FileNotFoundError):
            await service.set_share(intruder, metadata.file_id)
