"""Pydantic schemas for authentication endpoints."""

from pydantic import BaseModel


class CurrentUserResponse(BaseModel):
    """Response model for the authenticated user and their usage."""
    user_id: int
    username: str
    role: str
    status: str
    storage_limit: int
    storage_usage: int
    file_count: int
