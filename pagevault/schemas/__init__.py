"""Pydantic schemas for API requests and responses."""

from pagevault.schemas.admin import (
    EventOutcome,
    ObjectEvent,
    ObjectEventsRequest,
    ObjectEventsResponse,
    ReconcileResponse,
    ReindexResponse
)
from pagevault.schemas.auth import CurrentUserResponse
from pagevault.schemas.common import ErrorResponse
from pagevault.schemas.files import (
    DeleteFileResponse,
    FileResponse,
    ListFilesResponse,
    SearchResultResponse,
    UpdateFileRequest
)
from pagevault.schemas.shares import PublicShareResponse, ShareRequest, ShareResponse
from pagevault.schemas.tags import (
    AttachTagRequest,
    FileTagsResponse,
    ListTagsResponse,
    TagRequest,
    TagResponse
)

__all__ = [
    "EventOutcome",
    "ObjectEvent",
    "ObjectEventsRequest",
    "ObjectEventsResponse",
    "ReconcileResponse",
    "ReindexResponse",
    "CurrentUserResponse",
    "ErrorResponse",
    "DeleteFileResponse",
    "FileResponse",
    "ListFilesResponse",
    "SearchResultResponse",
    "UpdateFileRequest",
    "PublicShareResponse",
    "ShareRequest",
    "ShareResponse",
    "AttachTagRequest",
    "FileTagsResponse",
    "ListTagsResponse",
    "TagRequest",
    "TagResponse"
]
