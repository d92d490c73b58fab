"""Pydantic schemas for tag endpoints."""

from typing import List
from pydantic import BaseModel

from pagevault.repositories.tag_repository import Tag


class TagRequest(BaseModel):
    """Request model for creating or renaming a tag."""
    name: str


class TagResponse(BaseModel):
    """Response model for a tag."""
    tag_id: int
    name: str
    created_at: str

    @classmethod
    def from_tag(cls, tag: Tag) -> "TagResponse":
        return cls(tag_id=tag.tag_id, name=tag.name, created_at=tag.created_at.isoformat())


class ListTagsResponse(BaseModel):
    """Response model for tag listing."""
    tags: List[TagResponse]


class AttachTagRequest(BaseModel):
    """Request model for attaching a tag to a file."""
    tag_id: int


class FileTagsResponse(BaseModel):
    """Response model for a file's tags after a change."""
    file_id: str
    tags: List[str]
