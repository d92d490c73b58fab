"""Repository layer for data access."""

from pagevault.repositories.user_repository import UserRepository
from pagevault.repositories.file_repository import FileRepository
from pagevault.repositories.tag_repository import TagRepository
from pagevault.repositories.share_repository import ShareRepository

__all__ = [
    "UserRepository",
    "FileRepository",
    "TagRepository",
    "ShareRepository",
]
