"""Server-specific data type definitions."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from common.types import ContentKind


@dataclass(frozen=True)
class FileMetadata:
    """
    Complete metadata for a file in the system.
    """
    file_id: str
    owner_id: int
    object_key: str
    filename: str
    display_name: str
    content_kind: ContentKind
    content_type: str
    size: int
    description: Optional[str]
    tags: List[str]
    created_at: datetime
    updated_at: datetime
    has_text: bool = False


@dataclass(frozen=True)
class SearchResult:
    file: FileMetadata
    snippet: Optional[str] = None
    score: Optional[float] = None


@dataclass(frozen=True)
class StoredObject:
    """
    Object bytes plus the headers the object store returned with them.
    """
    key: str
    data: bytes
    size: int
    content_type: Optional[str] = None
    custom_metadata: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ListedObject:
    key: str
    size: int


@dataclass(frozen=True)
class ObjectPage:
    objects: List[ListedObject]
    next_cursor: Optional[str]
    truncated: bool


@dataclass(frozen=True)
class VectorMatch:
    id: str
    score: float


@dataclass(frozen=True)
class Extraction:
    title: Optional[str]
    text: str


@dataclass
class ReconcileReport:
    """
    Counters for one reconciliation sweep.
    """
    listed: int = 0
    known: int = 0
    adopted: int = 0
    registered: int = 0
    already_registered: int = 0
    skipped: int = 0
    failed: int = 0
    lookup_mode: str = "keyset"

    def to_dict(self) -> Dict[str, object]:
        return {
            "listed": self.listed,
            "known": self.known,
            "adopted": self.adopted,
            "registered": self.registered,
            "already_registered": self.already_registered,
            "skipped": self.skipped,
            "failed": self.failed,
            "lookup_mode": self.lookup_mode,
        }
