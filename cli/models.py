"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal, Optional, Union


@dataclass(frozen=True)
class LoginCommand:
    """Store an API key after verifying it."""

    api_key: str
    command: Literal["login"] = "login"


@dataclass(frozen=True)
class WhoamiCommand:
    """Show the current account."""

    command: Literal["whoami"] = "whoami"


@dataclass(frozen=True)
class UploadCommand:
    """Upload local documents."""

    file_list: tuple[str, ...]
    command: Literal["upload"] = "upload"


@dataclass(frozen=True)
class ListCommand:
    """List files, optionally by tag."""

    tag: Optional[str] = None
    command: Literal["list"] = "list"


@dataclass(frozen=True)
class SearchCommand:
    """Search files."""

    query: str
    mode: Optional[str] = None
    tag: Optional[str] = None
    command: Literal["search"] = "search"


@dataclass(frozen=True)
class DownloadCommand:
    """Download file by id."""

    file_id: str
    output_path: Optional[str] = None
    command: Literal["download"] = "download"


@dataclass(frozen=True)
class DeleteCommand:
    """Delete file by id."""

    file_id: str
    command: Literal["delete"] = "delete"


@dataclass(frozen=True)
class ShareCommand:
    """Create, enable or disable a share link."""

    file_id: str
    enable: Optional[bool] = None
    command: Literal["share"] = "share"


@dataclass(frozen=True)
class ReindexCommand:
    """Run one reindex batch."""

    limit: Optional[int] = None
    command: Literal["reindex"] = "reindex"


@dataclass(frozen=True)
class SyncCommand:
    """Run a reconciliation sweep."""

    command: Literal["sync"] = "sync"


CommandRequest = Union[
    LoginCommand,
    WhoamiCommand,
    UploadCommand,
    ListCommand,
    SearchCommand,
    DownloadCommand,
    DeleteCommand,
    ShareCommand,
    ReindexCommand,
    SyncCommand,
]
