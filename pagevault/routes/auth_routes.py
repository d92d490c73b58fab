"""Authentication API routes."""

from fastapi import APIRouter, Depends

from pagevault.auth import get_current_user
from pagevault.repositories.user_repository import User
from pagevault.schemas.auth import CurrentUserResponse
from pagevault.services.file_service import FileService

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.get("/me", response_model=CurrentUserResponse)
async def me(current_user: User = Depends(get_current_user)):
    """
    Return the authenticated user with their storage usage.

    Parameters:
        - Authorization header: Bearer <api_key> (required)

    Returns:
        - user_id, username, role, status
        - storage_limit, storage_usage (bytes), file_count

    Raises:
        - 401: Invalid or missing API Key
        - 403: Account locked
    """
    file_service = FileService()
    usage, file_count = await file_service.get_usage(current_user)

    return CurrentUserResponse(
        user_id=current_user.user_id,
        username=current_user.username,
        role=current_user.role,
        status=current_user.status,
        storage_limit=current_user.storage_limit,
        storage_usage=usage,
        file_count=file_count,
    )
