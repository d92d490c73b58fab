"""Pydantic schemas for share endpoints."""

from typing import Optional
from pydantic import BaseModel

from pagevault.repositories.share_repository import Share


class ShareRequest(BaseModel):
    """Request model for creating or toggling a share link."""
    enable: Optional[bool] = None


class ShareResponse(BaseModel):
    """Response model for a file's share link."""
    share_id: str
    file_id: str
    is_enabled: bool
    visit_count: int
    url: str

    @classmethod
    def from_share(cls, share: Share) -> "ShareResponse":
        return cls(
            share_id=share.share_id,
            file_id=share.file_id,
            is_enabled=share.is_enabled,
            visit_count=share.visit_count,
            url=f"/s/{share.share_id}",
        )


class PublicShareResponse(BaseModel):
    """Response model for public share information."""
    share_id: str
    display_name: str
    filename: str
    content_kind: str
    size: int
    description: Optional[str] = None
    visit_count: int
    raw_url: str
    created_at: str
