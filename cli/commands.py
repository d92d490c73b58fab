"""Command handler functions for CLI operations."""

from typing import Optional

from cli.api_client import PageVaultClient
from cli.config import Config
from cli.models import (
    DeleteCommand,
    DownloadCommand,
    ListCommand,
    LoginCommand,
    ReindexCommand,
    SearchCommand,
    ShareCommand,
    SyncCommand,
    UploadCommand,
    WhoamiCommand,
)
from common.logging_config import get_logger

logger = get_logger(__name__)


_client: Optional[PageVaultClient] = None


def get_client() -> PageVaultClient:
    """
    Get or create global PageVaultClient instance.

    Returns:
        PageVaultClient instance
    """
    global _client
    if _client is None:
        logger.debug("Creating new PageVaultClient instance")
        _client = PageVaultClient(Config())
    return _client


def handle_login(cmd: LoginCommand, client: Optional[PageVaultClient] = None) -> str:
    """
    Handle 'login' command.

    Args:
        cmd: LoginCommand with api_key
        client: Optional PageVaultClient for dependency injection (testing)

    Returns:
        Success or error message
    """
    if client is None:
        client = get_client()
    return client.login(cmd.api_key)


def handle_whoami(cmd: WhoamiCommand, client: Optional[PageVaultClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.whoami()


def handle_upload(cmd: UploadCommand, client: Optional[PageVaultClient] = None) -> str:
    """
    Handle 'upload' command.

    Args:
        cmd: UploadCommand with file_list
        client: Optional PageVaultClient for dependency injection (testing)

    Returns:
        One status line per file
    """
    if client is None:
        client = get_client()
    return client.upload_files(list(cmd.file_list))


def handle_list(cmd: ListCommand, client: Optional[PageVaultClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.list_files(cmd.tag)


def handle_search(cmd: SearchCommand, client: Optional[PageVaultClient] = None) -> str:
    """
    Handle 'search' command.

    Args:
        cmd: SearchCommand with query, optional mode and tag
        client: Optional PageVaultClient for dependency injection (testing)

    Returns:
        Result table or error message
    """
    if client is None:
        client = get_client()
    return client.search(cmd.query, cmd.mode, cmd.tag)


def handle_download(cmd: DownloadCommand, client: Optional[PageVaultClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.download(cmd.file_id, cmd.output_path)


def handle_delete(cmd: DeleteCommand, client: Optional[PageVaultClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.delete_file(cmd.file_id)


def handle_share(cmd: ShareCommand, client: Optional[PageVaultClient] = None) -> str:
    """
    Handle 'share' command.

    Args:
        cmd: ShareCommand with file_id and optional explicit state
        client: Optional PageVaultClient for dependency injection (testing)

    Returns:
        Share state and URL, or error message
    """
    if client is None:
        client = get_client()
    return client.share(cmd.file_id, cmd.enable)


def handle_reindex(cmd: ReindexCommand, client: Optional[PageVaultClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.reindex(cmd.limit)


def handle_sync(cmd: SyncCommand, client: Optional[PageVaultClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.sync()
