"""File operation API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from fastapi.responses import Response

from common.constants import MAX_UPLOAD_BYTES, SEARCH_MODE_VECTOR
from pagevault.auth import get_current_user
from pagevault.repositories.user_repository import User
from pagevault.schemas.files import (
    DeleteFileResponse,
    FileResponse,
    ListFilesResponse,
    SearchResultResponse,
    UpdateFileRequest
)
from pagevault.schemas.tags import AttachTagRequest, FileTagsResponse
from pagevault.services.file_service import FileService
from pagevault.services.search_service import SearchService
from pagevault.services.tag_service import TagService

router = APIRouter(prefix="/files", tags=["Files"])


@router.post("", response_model=FileResponse, status_code=status.HTTP_201_CREATED)
async def upload_file(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user)
):
    """
    Upload an HTML or Markdown document.

    Parameters:
        - file: Document to upload (multipart/form-data), .html/.htm/.md/.markdown
        - Authorization header: Bearer <api_key> (required)

    Returns:
        - Metadata of the new file, including the derived display name

    Raises:
        - 400: Unsupported extension, empty or oversized file
        - 401: Invalid or missing API Key
        - 403: Storage quota exceeded or account restricted
        - 503: Object store unavailable
    """
    file_service = FileService()

    # One byte past the limit is enough to reject oversized uploads
    data = await file.read(MAX_UPLOAD_BYTES + 1)

    metadata = await file_service.upload_file(current_user, file.filename, data)
    return FileResponse.from_metadata(metadata)


@router.get("", response_model=ListFilesResponse)
async def list_files(
    q: Optional[str] = Query(None, description="Search query; omit to list all files"),
    mode: str = Query(SEARCH_MODE_VECTOR, description="vector or metadata"),
    tag: Optional[str] = Query(None, description="Only files carrying this tag name"),
    current_user: User = Depends(get_current_user)
):
    """
    List or search the caller's files.

    Parameters:
        - q: Search text (blank lists files newest first)
        - mode: "vector" (falls back to metadata search) or "metadata"
        - tag: Optional tag name filter
        - Authorization header: Bearer <api_key> (required)

    Returns:
        - files: Matching files with optional snippet and score
        - count: Number of results

    Raises:
        - 400: Unknown search mode
        - 401: Invalid or missing API Key
    """
    search_service = SearchService()
    results = await search_service.search(current_user, q, mode, tag)

    files = [SearchResultResponse.from_result(result) for result in results]
    return ListFilesResponse(files=files, count=len(files))


@router.get("/{file_id}", response_model=FileResponse)
async def get_file_metadata(
    file_id: str,
    current_user: User = Depends(get_current_user)
):
    """
    Get metadata for a single file.

    Raises:
        - 401: Invalid or missing API Key
        - 404: File not found
    """
    file_service = FileService()
    metadata = await file_service.get_file_metadata(current_user, file_id)
    return FileResponse.from_metadata(metadata)


@router.get("/{file_id}/content")
async def download_file(
    file_id: str,
    current_user: User = Depends(get_current_user)
):
    """
    Download the raw bytes of a file.

    Raises:
        - 401: Invalid or missing API Key
        - 404: File or its content not found
        - 503: Object store unavailable
    """
    file_service = FileService()
    file, data = await file_service.read_content(current_user, file_id)

    return Response(
        content=data,
        media_type=file.content_type,
        headers={"Content-Disposition": f'attachment; filename="{file.filename}"'},
    )


@router.patch("/{file_id}", response_model=FileResponse)
async def update_file(
    file_id: str,
    request: UpdateFileRequest,
    current_user: User = Depends(get_current_user)
):
    """
    Rename a file or change its description.

    Raises:
        - 400: Empty display name
        - 401: Invalid or missing API Key
        - 404: File not found
    """
    file_service = FileService()
    metadata = await file_service.update_file(
        current_user, file_id, request.display_name, request.description
    )
    return FileResponse.from_metadata(metadata)


@router.delete("/{file_id}", response_model=DeleteFileResponse)
async def delete_file(
    file_id: str,
    current_user: User = Depends(get_current_user)
):
    """
    Delete a file's object, record and vector entry.

    Raises:
        - 401: Invalid or missing API Key
        - 404: File not found
        - 503: Object store unavailable (nothing is deleted)
    """
    file_service = FileService()
    await file_service.delete_file(current_user, file_id)
    return DeleteFileResponse(file_id=file_id, deleted=True)


@router.post("/{file_id}/tags", response_model=FileTagsResponse)
async def attach_tag(
    file_id: str,
    request: AttachTagRequest,
    current_user: User = Depends(get_current_user)
):
    """
    Attach one of the caller's tags to one of their files.

    Raises:
        - 403: Tag belongs to another user
        - 404: File or tag not found
    """
    tag_service = TagService()
    tags = await tag_service.attach_tag(current_user, file_id, request.tag_id)
    return FileTagsResponse(file_id=file_id, tags=tags)


@router.delete("/{file_id}/tags/{tag_id}", response_model=FileTagsResponse)
async def detach_tag(
    file_id: str,
    tag_id: int,
    current_user: User = Depends(get_current_user)
):
    """
    Detach a tag from a file.

    Raises:
        - 403: Tag belongs to another user
        - 404: File or tag not found
    """
    tag_service = TagService()
    tags = await tag_service.detach_tag(current_user, file_id, tag_id)
    return FileTagsResponse(file_id=file_id, tags=tags)
