"""Tag API routes."""

from fastapi import APIRouter, Depends, status

from pagevault.auth import get_current_user
from pagevault.repositories.user_repository import User
from pagevault.schemas.tags import ListTagsResponse, TagRequest, TagResponse
from pagevault.services.tag_service import TagService

router = APIRouter(prefix="/tags", tags=["Tags"])


@router.get("", response_model=ListTagsResponse)
async def list_tags(current_user: User = Depends(get_current_user)):
    """
    List the caller's tags alphabetically.
    """
    tag_service = TagService()
    tags = await tag_service.list_tags(current_user)
    return ListTagsResponse(tags=[TagResponse.from_tag(tag) for tag in tags])


@router.post("", response_model=TagResponse, status_code=status.HTTP_201_CREATED)
async def create_tag(request: TagRequest, current_user: User = Depends(get_current_user)):
    """
    Create a tag.

    Raises:
        - 400: Empty name or the caller already has a tag with this name
    """
    tag_service = TagService()
    tag = await tag_service.create_tag(current_user, request.name)
    return TagResponse.from_tag(tag)


@router.put("/{tag_id}", response_model=TagResponse)
async def rename_tag(tag_id: int, request: TagRequest, current_user: User = Depends(get_current_user)):
    """
    Rename one of the caller's tags.

    Raises:
        - 400: Empty or duplicate name
        - 403: Tag belongs to another user
        - 404: Tag not found
    """
    tag_service = TagService()
    tag = await tag_service.rename_tag(current_user, tag_id, request.name)
    return TagResponse.from_tag(tag)


@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tag(tag_id: int, current_user: User = Depends(get_current_user)):
    tag_service = TagService()
    await tag_service.delete_tag(current_user, tag_id)
