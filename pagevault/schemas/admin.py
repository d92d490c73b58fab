"""Pydantic schemas for admin endpoints."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class ReconcileResponse(BaseModel):
    """Response model for a reconciliation sweep."""
    listed: int
    known: int
    adopted: int
    registered: int
    already_registered: int
    skipped: int
    failed: int
    lookup_mode: str


class ReindexResponse(BaseModel):
    """Response model for a reindex batch."""
    processed: int


class ObjectEvent(BaseModel):
    """One object notification, as delivered by an S3-style event queue."""
    action: str
    key: Optional[str] = None
    object: Dict[str, Any] = Field(default_factory=dict)

    @property
    def object_key(self) -> Optional[str]:
        return self.object.get("key") or self.key


class ObjectEventsRequest(BaseModel):
    """Request model for a batch of object events."""
    events: List[ObjectEvent]


class EventOutcome(BaseModel):
    """Outcome of one object event."""
    key: Optional[str] = None
    action: str
    outcome: str


class ObjectEventsResponse(BaseModel):
    """Response model for an event batch."""
    results: List[EventOutcome]
