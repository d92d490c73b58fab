"""Service locator for shared adapters and background components."""

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from pagevault.embedding_client import EmbeddingClient
    from pagevault.indexing_queue import IndexingQueue
    from pagevault.object_store import ObjectStore
    from pagevault.sync_task import SyncTask
    from pagevault.vector_index import VectorIndex

_object_store: Optional['ObjectStore'] = None
_embedding_client: Optional['EmbeddingClient'] = None
_vector_index: Optional['VectorIndex'] = None
_indexing_queue: Optional['IndexingQueue'] = None
_sync_task: Optional['SyncTask'] = None


def set_object_store(store):
    """Set global object store instance"""
    global _object_store
    _object_store = store


def get_object_store() -> 'ObjectStore':
    """Get global object store instance, creating the S3 adapter on first use"""
    global _object_store
    if _object_store is None:
        from pagevault.object_store import ObjectStore
        _object_store = ObjectStore()
    return _object_store


def set_embedding_client(client):
    """Set global embedding client (None disables vector search)"""
    global _embedding_client
    _embedding_client = client


def get_embedding_client() -> Optional['EmbeddingClient']:
    """Get global embedding client instance"""
    return _embedding_client


def set_vector_index(index):
    """Set global vector index (None disables vector search)"""
    global _vector_index
    _vector_index = index


def get_vector_index() -> Optional['VectorIndex']:
    """Get global vector index instance"""
    return _vector_index


def set_indexing_queue(queue):
    """Set global indexing queue instance"""
    global _indexing_queue
    _indexing_queue = queue


def get_indexing_queue() -> 'IndexingQueue':
    """Get global indexing queue instance, creating it on first use"""
    global _indexing_queue
    if _indexing_queue is None:
        from pagevault.indexing_queue import IndexingQueue
        _indexing_queue = IndexingQueue()
    return _indexing_queue


def set_sync_task(task):
    """Set global sync task instance"""
    global _sync_task
    _sync_task = task


def get_sync_task() -> Optional['SyncTask']:
    """Get global sync task instance"""
    return _sync_task


def reset():
    """Forget every registered instance"""
    global _object_store, _embedding_client, _vector_index, _indexing_queue, _sync_task
    _object_store = None
    _embedding_client = None
    _vector_index = None
    _indexing_queue = None
    _sync_task = None
