"""Pydantic schemas for file operation endpoints."""

from typing import List, Optional
from pydantic import BaseModel

from pagevault.types import FileMetadata, SearchResult


class FileResponse(BaseModel):
    """Response model for file metadata."""
    file_id: str
    filename: str
    display_name: str
    content_kind: str
    content_type: str
    size: int
    description: Optional[str] = None
    tags: List[str]
    owner_id: int
    has_text: bool
    created_at: str
    updated_at: str

    @classmethod
    def from_metadata(cls, metadata: FileMetadata) -> "FileResponse":
        return cls(
            file_id=metadata.file_id,
            filename=metadata.filename,
            display_name=metadata.display_name,
            content_kind=metadata.content_kind.value,
            content_type=metadata.content_type,
            size=metadata.size,
            description=metadata.description,
            tags=metadata.tags,
            owner_id=metadata.owner_id,
            has_text=metadata.has_text,
            created_at=metadata.created_at.isoformat(),
            updated_at=metadata.updated_at.isoformat(),
        )


class SearchResultResponse(FileResponse):
    """Response model for one search hit."""
    snippet: Optional[str] = None
    score: Optional[float] = None

    @classmethod
    def from_result(cls, result: SearchResult) -> "SearchResultResponse":
        base = FileResponse.from_metadata(result.file).model_dump()
        return cls(**base, snippet=result.snippet, score=result.score)


class ListFilesResponse(BaseModel):
    """Response model for file listing and search."""
    files: List[SearchResultResponse]
    count: int


class UpdateFileRequest(BaseModel):
    """Request model for renaming or describing a file."""
    display_name: Optional[str] = None
    description: Optional[str] = None


class DeleteFileResponse(BaseModel):
    """Response model for file deletion."""
    file_id: str
    deleted: bool
