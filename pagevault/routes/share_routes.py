"""Share link API routes, including the public share endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from pagevault.auth import get_current_user
from pagevault.repositories.user_repository import User
from pagevault.schemas.shares import PublicShareResponse, ShareRequest, ShareResponse
from pagevault.services.share_service import ShareService

router = APIRouter(tags=["Shares"])

# Shared documents are rendered sandboxed
RAW_CONTENT_SECURITY_POLICY = (
    "sandbox allow-scripts allow-same-origin; default-src 'self'; "
    "style-src 'unsafe-inline'; img-src * data:;"
)


@router.post("/files/{file_id}/share", response_model=ShareResponse)
async def set_share(
    file_id: str,
    request: Optional[ShareRequest] = None,
    current_user: User = Depends(get_current_user)
):
    """
    Create or toggle a file's share link.

    Parameters:
        - enable: true/false to set explicitly; omit to toggle (creates the link if missing)

    Raises:
        - 404: File not found, or disabling a link that does not exist
    """
    share_service = ShareService()
    enable = request.enable if request is not None else None
    share = await share_service.set_share(current_user, file_id, enable)
    return ShareResponse.from_share(share)


@router.get("/s/{share_id}", response_model=PublicShareResponse)
async def get_public_share(share_id: str):
    """
    Public information about a shared file. No authentication.

    Raises:
        - 404: Unknown or disabled share
    """
    share_service = ShareService()
    share, file = await share_service.resolve(share_id)

    return PublicShareResponse(
        share_id=share.share_id,
        display_name=file.display_name,
        filename=file.filename,
        content_kind=file.content_kind,
        size=file.size,
        description=file.description,
        visit_count=share.visit_count,
        raw_url=f"/raw/{share.share_id}",
        created_at=file.created_at.isoformat(),
    )


@router.get("/raw/{share_id}")
async def get_raw_share(share_id: str):
    """
    Serve shared content under a sandboxing CSP and count the visit.

    Raises:
        - 404: Unknown or disabled share
    """
    share_service = ShareService()
    file, data = await share_service.open_raw(share_id)

    return Response(
        content=data,
        media_type=file.content_type,
        headers={
            "Content-Security-Policy": RAW_CONTENT_SECURITY_POLICY,
            "X-Content-Type-Options": "nosniff",
        },
    )
