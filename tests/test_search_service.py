"""Tests for search planning and vector fallback."""

import pytest

from pagevault.exceptions import ValidationError
from pagevault.indexing_queue import IndexingQueue
from pagevault.repositories.tag_repository import TagRepository
from pagevault.services.file_service import FileService
from pagevault.services.index_service import IndexService
from pagevault.services.search_service import SearchService
from tests.fakes import FakeEmbeddingClient, FakeVectorIndex, make_user


async def _seed(owner, object_store, embedding_client, vector_index):
    queue = IndexingQueue()
    index_service = IndexService(object_store, embedding_client, vector_index)
    service = FileService(object_store=object_store, index_service=index_service, indexing_queue=queue)

    k8s = await service.upload_file(owner, "k8s.md", b"# Cluster Ops\n\nkubernetes cluster deploy guide")
    pasta = await service.upload_file(owner, "pasta.md", b"# Dinner\n\npasta recipe with tomato")
    garden = await service.upload_file(owner, "garden.md", b"# Garden Report\n\ntomato garden notes")
    await queue.drain()
    return k8s, pasta, garden


class TestVectorSearch:
    @pytest.mark.asyncio
    async def test_ranked_by_similarity(self, owner, object_store, embedding_client, vector_index):
        k8s, pasta, garden = await _seed(owner, object_store, embedding_client, vector_index)
        service = SearchService(embedding_client, vector_index)

        results = await service.search(owner, "pasta tomato", mode="vector")

        assert [r.file.file_id for r in results][:2] == [pasta.file_id, garden.file_id]
        assert all(r.score is not None for r in results)
        assert k8s.file_id not in [r.file.file_id for r in results]

    @pytest.mark.asyncio
    async def test_results_are_owner_scoped(self, owner, object_store, embedding_client, vector_index):
        await _seed(owner, object_store, embedding_client, vector_index)
        stranger = make_user("stranger")
        service = SearchService(embedding_client, vector_index)

        assert await service.search(stranger, "kubernetes", mode="vector") == []

    @pytest.mark.asyncio
    async def test_tag_filter_applies_to_vector_hits(self, owner, object_store, embedding_client, vector_index):
        _, pasta, garden = await _seed(owner, object_store, embedding_client, vector_index)
        tag = TagRepository.create_tag(owner.user_id, "outdoors")
        TagRepository.attach(garden.file_id, tag.tag_id)
        service = SearchService(embedding_client, vector_index)

        results = await service.search(owner, "tomato", mode="vector", tag="outdoors")

        assert [r.file.file_id for r in results] == [garden.file_id]
        assert results[0].file.tags == ["outdoors"]

    @pytest.mark.asyncio
    async def test_snippet_comes_from_text(self, owner, object_store, embedding_client, vector_index):
        await _seed(owner, object_store, embedding_client, vector_index)
        service = SearchService(embedding_client, vector_index)

        results = await service.search(owner, "kubernetes", mode="vector")

        assert "kubernetes" in results[0].snippet


class TestFallback:
    @pytest.mark.asyncio
    async def test_embedding_failure_falls_back_to_metadata(self, owner, object_store, embedding_client, vector_index):
        await _seed(owner, object_store, embedding_client, vector_index)
        broken = FakeEmbeddingClient(vocabulary=["x"], fail=True)
        service = SearchService(broken, vector_index)

        results = await service.search(owner, "garden", mode="vector")

        assert [r.file.display_name for r in results] == ["Garden Report"]
        assert results[0].score is None

    @pytest.mark.asyncio
    async def test_vector_query_failure_falls_back(self, owner, object_store, embedding_client, vector_index):
        await _seed(owner, object_store, embedding_client, vector_index)
        service = SearchService(embedding_client, FakeVectorIndex(fail_query=True))

        results = await service.search(owner, "dinner", mode="vector")

        assert [r.file.display_name for r in results] == ["Dinner"]

    @pytest.mark.asyncio
    async def test_zero_vector_matches_fall_back(self, owner, object_store, embedding_client, vector_index):
        await _seed(owner, object_store, embedding_client, vector_index)
        service = SearchService(embedding_client, FakeVectorIndex())

        results = await service.search(owner, "cluster ops", mode="vector")

        assert [r.file.display_name for r in results] == ["Cluster Ops"]

    @pytest.mark.asyncio
    async def test_no_backend_uses_metadata(self, owner, object_store, embedding_client, vector_index):
        await _seed(owner, object_store, embedding_client, vector_index)
        service = SearchService(None, None)

        results = await service.search(owner, "REPORT")

        assert [r.file.display_name for r in results] == ["Garden Report"]


class TestMetadataSearch:
    @pytest.mark.asyncio
    async def test_matches_description(self, owner, object_store, embedding_client, vector_index):
        _, pasta, _ = await _seed(owner, object_store, embedding_client, vector_index)
        file_service = FileService(object_store=object_store)
        await file_service.update_file(owner, pasta.file_id, description="Weeknight favourite")
        service = SearchService(embedding_client, vector_index)

        results = await service.search(owner, "weeknight", mode="metadata")

        assert [r.file.file_id for r in results] == [pasta.file_id]
        assert "Weeknight" in results[0].snippet

    @pytest.mark.asyncio
    async def test_blank_query_lists_newest_first(self, owner, object_store, embedding_client, vector_index):
        k8s, pasta, garden = await _seed(owner, object_store, embedding_client, vector_index)
        service = SearchService(embedding_client, vector_index)
        embeds_before = len(embedding_client.calls)

        results = await service.search(owner, "   ", mode="vector")

        assert [r.file.file_id for r in results] == [garden.file_id, pasta.file_id, k8s.file_id]
        assert len(embedding_client.calls) == embeds_before

    @pytest.mark.asyncio
    async def test_unknown_mode(self, owner):
        with pytest.raises(ValidationError):
            await SearchService(None, None).search(owner, "x", mode="fuzzy")
