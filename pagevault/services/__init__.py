"""Service layer for business logic."""

from pagevault.services.file_service import FileService
from pagevault.services.index_service import IndexService
from pagevault.services.search_service import SearchService
from pagevault.services.share_service import ShareService
from pagevault.services.tag_service import TagService

__all__ = [
    "FileService",
    "IndexService",
    "SearchService",
    "ShareService",
    "TagService",
]
