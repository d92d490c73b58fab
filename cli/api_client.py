"""HTTP client for communicating with the PageVault server."""

import os
import time
import uuid
from pathlib import Path
from typing import Optional

import httpx

from cli.config import Config
from cli.utils import format_file_size, format_file_table
from common.constants import MAX_UPLOAD_BYTES
from common.logging_config import get_logger
from common.types import ContentKind, is_supported_filename

logger = get_logger(__name__)


class PageVaultClient:
    """HTTP client for the PageVault API with retry logic and error handling."""

    def __init__(self, config: Config, transport: Optional[httpx.BaseTransport] = None):
        """
        Initialize API client.

        Args:
            config: Configuration instance
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.config = config
        self.session = httpx.Client(
            base_url=config.get_base_url(),
            timeout=config.get_timeout(),
            transport=transport,
        )
        self.request_id = None
        logger.info(f"Initialized PageVaultClient [base_url={config.get_base_url()}]")

    def close(self) -> None:
        self.session.close()

    def _request_with_retry(
        self,
        method: str,
        endpoint: str,
        max_retries: Optional[int] = None,
        **kwargs
    ) -> httpx.Response:
        """
        Make HTTP request with retry logic on 5xx errors and network failures.

        Args:
            method: HTTP method (GET, POST, DELETE, etc.)
            endpoint: API endpoint path
            max_retries: Max retry attempts (uses config default if None)
            **kwargs: Additional arguments to pass to httpx request

        Returns:
            HTTP response object

        Raises:
            ConnectionError: If max retries exceeded or connection fails
        """
        retry_config = self.config.get_retry_config()
        max_retries = max_retries if max_retries is not None else retry_config['max_retries']
        backoff = retry_config['retry_backoff_multiplier']

        last_exception = None

        self.request_id = str(uuid.uuid4())
        headers = dict(kwargs.pop('headers', None) or {})
        headers['X-Request-ID'] = self.request_id
        kwargs['headers'] = headers

        logger.debug(f"Making request: {method} {endpoint} [request_id={self.request_id}]")

        for attempt in range(max_retries + 1):
            try:
                response = self.session.request(method, endpoint, **kwargs)

                logger.debug(
                    f"Response received: {method} {endpoint} status={response.status_code} [request_id={self.request_id}]"
                )

                if 400 <= response.status_code < 500:
                    logger.warning(
                        f"Client error: {method} {endpoint} status={response.status_code} [request_id={self.request_id}]"
                    )
                    return response

                if response.status_code >= 500 and attempt < max_retries:
                    delay = backoff ** attempt
                    logger.warning(
                        f"Server error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} status={response.status_code}, retrying in {delay}s [request_id={self.request_id}]"
                    )
                    time.sleep(delay)
                    continue

                return response

            except (httpx.ConnectError, httpx.TimeoutException) as e:
                last_exception = e
                if attempt < max_retries:
                    delay = backoff ** attempt
                    logger.warning(
                        f"Network error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} error={type(e).__name__}, retrying in {delay}s [request_id={self.request_id}]"
                    )
                    time.sleep(delay)
                    continue
                logger.error(
                    f"Network error (max retries exceeded): {method} {endpoint} error={e} [request_id={self.request_id}]"
                )

        if isinstance(last_exception, httpx.TimeoutException):
            raise ConnectionError("Request timed out. Server may be overloaded.")
        if last_exception is not None:
            raise ConnectionError("Cannot connect to PageVault server. Is it running?")
        raise ConnectionError("Max retries exceeded")

    def _format_error(self, response: httpx.Response) -> str:
        """
        Map HTTP errors to user-friendly messages.

        Args:
            response: HTTP response object

        Returns:
            User-friendly error message
        """
        try:
            error_data = response.json()
            detail = error_data.get('detail', 'Unknown error')
            code = error_data.get('code', 'UNKNOWN')
        except ValueError:
            detail = response.text if response.text else 'Unknown error'
            code = 'UNKNOWN'

        error_messages = {
            'INVALID_API_KEY': 'Not authenticated. Please run: login <api_key>',
            'ACCOUNT_RESTRICTED': f'Account restricted: {detail}',
            'FILE_NOT_FOUND': 'File not found on server.',
            'UNAUTHORIZED_ACCESS': 'You do not have permission to perform this action.',
            'QUOTA_EXCEEDED': f'Storage quota exceeded: {detail}',
            'VALIDATION_ERROR': f'Invalid request: {detail}',
            'STORAGE_UNAVAILABLE': 'Object storage is currently unavailable. Please try again later.',
            'SHARE_NOT_FOUND': 'Share link not found or disabled.',
            'TAG_NOT_FOUND': 'Tag not found.',
            'TAG_ALREADY_EXISTS': 'A tag with that name already exists.',
            'SYNC_IN_PROGRESS': 'A reconciliation sweep is already running.',
        }

        if code in error_messages:
            return error_messages[code]

        status_messages = {
            400: 'Bad request',
            401: 'Not authenticated',
            403: 'Access forbidden',
            404: 'Not found',
            409: 'Conflict',
            413: 'File too large',
            422: 'Invalid request parameters',
            500: 'Server error',
            503: 'Service unavailable',
        }

        message = status_messages.get(response.status_code, detail)
        return f"{message} (Code: {code})" if code != 'UNKNOWN' else message

    def _get_auth_header(self) -> dict:
        """
        Get Authorization header with API key.

        Raises:
            ValueError: If no API key is configured
        """
        api_key = self.config.get_api_key()
        if not api_key:
            raise ValueError("Not logged in. Please run: login <api_key>")
        return {'Authorization': f'Bearer {api_key}'}

    def login(self, api_key: str) -> str:
        """
        Verify an API key against the server and store it.

        Args:
            api_key: Key issued by an administrator

        Returns:
            Result message
        """
        logger.info("Attempting login with provided API key")
        try:
            response = self._request_with_retry(
                'GET', '/auth/me', headers={'Authorization': f'Bearer {api_key}'}
            )

            if response.status_code == 200:
                data = response.json()
                self.config.set_api_key(api_key)
                logger.info(f"Login successful [user_id={data['user_id']}]")
                return f"Logged in as {data['username']} ({data['role']}).\nAPI key saved to config."

            logger.warning(f"Login failed status={response.status_code}")
            return f"Login failed: {self._format_error(response)}"

        except ConnectionError as e:
            logger.error(f"Connection error during login: {e}")
            return f"Error: {e}"
        except Exception as e:
            logger.error(f"Unexpected error during login: {e}", exc_info=True)
            return f"Unexpected error during login: {e}"

    def whoami(self) -> str:
        """Show the authenticated account and its storage usage."""
        try:
            response = self._request_with_retry('GET', '/auth/me', headers=self._get_auth_header())

            if response.status_code != 200:
                return f"Error: {self._format_error(response)}"

            data = response.json()
            return (
                f"User: {data['username']} (id {data['user_id']})\n"
                f"Role: {data['role']}  Status: {data['status']}\n"
                f"Storage: {format_file_size(data['storage_usage'])} / "
                f"{format_file_size(data['storage_limit'])} in {data['file_count']} file(s)"
            )

        except ValueError as e:
            return f"Error: {e}"
        except ConnectionError as e:
            logger.error(f"Connection error during whoami: {e}")
            return f"Error: {e}"
        except Exception as e:
            logger.error(f"Unexpected error during whoami: {e}", exc_info=True)
            return f"Unexpected error: {e}"

    def upload_files(self, file_paths: list[str]) -> str:
        """
        Upload local HTML or Markdown documents.

        Args:
            file_paths: Paths to upload (relative, absolute, or ~-prefixed)

        Returns:
            Formatted result message with upload status for each file
        """
        results = []

        try:
            headers = self._get_auth_header()
        except ValueError as e:
            return f"Error: {e}"

        for file_path in file_paths:
            path = Path(file_path).expanduser()

            if not path.exists():
                results.append(f"Error: File not found: {file_path}")
                continue
            if not path.is_file():
                results.append(f"Error: Not a file: {file_path}")
                continue
            if not is_supported_filename(path.name):
                results.append(f"Error: Unsupported file type: {file_path} (expected .html, .htm, .md or .markdown)")
                continue

            file_size = os.path.getsize(path)
            if file_size == 0:
                results.append(f"Error: File is empty: {file_path}")
                continue
            if file_size > MAX_UPLOAD_BYTES:
                results.append(
                    f"Error: File too large: {file_path} ({format_file_size(file_size)} > {format_file_size(MAX_UPLOAD_BYTES)})"
                )
                continue

            try:
                with open(path, 'rb') as f:
                    content = f.read()

                files = {'file': (path.name, content, ContentKind.from_filename(path.name).content_type)}
                response = self._request_with_retry('POST', '/files', headers=headers, files=files)

                if response.status_code == 201:
                    data = response.json()
                    results.append(
                        f"Uploaded {path.name} -> {data['file_id']} \"{data['display_name']}\" ({format_file_size(data['size'])})"
                    )
                    logger.info(f"Uploaded file [file_id={data['file_id']}] [filename={path.name}]")
                else:
                    results.append(f"Error uploading {path.name}: {self._format_error(response)}")

            except ConnectionError as e:
                logger.error(f"Connection error uploading {path.name}: {e}")
                results.append(f"Error uploading {path.name}: {e}")
            except OSError as e:
                results.append(f"Error reading {file_path}: {e}")

        return "\n".join(results)

    def list_files(self, tag: Optional[str] = None) -> str:
        """List the user's files newest first, optionally restricted to a tag."""
        params = {'tag': tag} if tag else {}
        return self._query_files(params, empty_message="No files found.")

    def search(self, query: str, mode: Optional[str] = None, tag: Optional[str] = None) -> str:
        """
        Search the user's files.

        Args:
            query: Search text
            mode: "vector" or "metadata" (server default when None)
            tag: Optional tag name filter

        Returns:
            Formatted result table or error message
        """
        params = {'q': query}
        if mode:
            params['mode'] = mode
        if tag:
            params['tag'] = tag
        return self._query_files(params, empty_message=f"No files match '{query}'.")

    def _query_files(self, params: dict, empty_message: str) -> str:
        try:
            response = self._request_with_retry('GET', '/files', headers=self._get_auth_header(), params=params)

            if response.status_code != 200:
                return f"Error: {self._format_error(response)}"

            data = response.json()
            if not data['files']:
                return empty_message
            return f"{format_file_table(data['files'])}\n\n{data['count']} file(s)"

        except ValueError as e:
            return f"Error: {e}"
        except ConnectionError as e:
            logger.error(f"Connection error listing files: {e}")
            return f"Error: {e}"
        except Exception as e:
            logger.error(f"Unexpected error listing files: {e}", exc_info=True)
            return f"Unexpected error: {e}"

    def download(self, file_id: str, output_path: Optional[str] = None) -> str:
        """
        Download a file's content to disk.

        Args:
            file_id: File to download
            output_path: Target path or directory (default: ./<filename>)

        Returns:
            Result message
        """
        try:
            headers = self._get_auth_header()
            meta_response = self._request_with_retry('GET', f'/files/{file_id}', headers=headers)
            if meta_response.status_code != 200:
                return f"Error: {self._format_error(meta_response)}"
            filename = meta_response.json()['filename']

            response = self._request_with_retry('GET', f'/files/{file_id}/content', headers=headers)
            if response.status_code != 200:
                return f"Error: {self._format_error(response)}"

            target = Path(output_path).expanduser() if output_path else Path.cwd() / filename
            if target.is_dir():
                target = target / filename
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(response.content)

            logger.info(f"Downloaded file [file_id={file_id}] -> {target}")
            return f"Downloaded {filename} ({format_file_size(len(response.content))}) to {target}"

        except ValueError as e:
            return f"Error: {e}"
        except ConnectionError as e:
            logger.error(f"Connection error during download: {e}")
            return f"Error: {e}"
        except OSError as e:
            return f"Error writing file: {e}"

    def delete_file(self, file_id: str) -> str:
        try:
            response = self._request_with_retry('DELETE', f'/files/{file_id}', headers=self._get_auth_header())
            if response.status_code != 200:
                return f"Error: {self._format_error(response)}"
            return f"Deleted {file_id}"

        except ValueError as e:
            return f"Error: {e}"
        except ConnectionError as e:
            logger.error(f"Connection error during delete: {e}")
            return f"Error: {e}"

    def share(self, file_id: str, enable: Optional[bool] = None) -> str:
        """
        Create, enable, disable or toggle a file's share link.

        Args:
            file_id: File to share
            enable: True/False to set explicitly, None to toggle

        Returns:
            Share state and public URL
        """
        try:
            body = {} if enable is None else {'enable': enable}
            response = self._request_with_retry(
                'POST', f'/files/{file_id}/share', headers=self._get_auth_header(), json=body
            )
            if response.status_code != 200:
                return f"Error: {self._format_error(response)}"

            data = response.json()
            state = "enabled" if data['is_enabled'] else "disabled"
            url = f"{self.config.get_base_url()}{data['url']}"
            return f"Share {state}: {url} ({data['visit_count']} visit(s))"

        except ValueError as e:
            return f"Error: {e}"
        except ConnectionError as e:
            logger.error(f"Connection error during share: {e}")
            return f"Error: {e}"

    def reindex(self, limit: Optional[int] = None) -> str:
        """Ask the server to process one reindex batch (admin only)."""
        try:
            params = {'limit': limit} if limit else {}
            response = self._request_with_retry(
                'POST', '/admin/reindex', headers=self._get_auth_header(), params=params
            )
            if response.status_code != 200:
                return f"Error: {self._format_error(response)}"
            return f"Reindexed {response.json()['processed']} file(s)"

        except ValueError as e:
            return f"Error: {e}"
        except ConnectionError as e:
            logger.error(f"Connection error during reindex: {e}")
            return f"Error: {e}"

    def sync(self) -> str:
        """Ask the server to run a reconciliation sweep now (admin only)."""
        try:
            response = self._request_with_retry(
                'POST', '/admin/reconcile', headers=self._get_auth_header(), max_retries=0
            )
            if response.status_code != 200:
                return f"Error: {self._format_error(response)}"

            data = response.json()
            return (
                f"Reconciliation complete ({data['lookup_mode']} lookup)\n"
                f"  listed: {data['listed']}  known: {data['known']}  adopted: {data['adopted']}\n"
                f"  registered: {data['registered']}  already registered: {data['already_registered']}\n"
                f"  skipped: {data['skipped']}  failed: {data['failed']}"
            )

        except ValueError as e:
            return f"Error: {e}"
        except ConnectionError as e:
            logger.error(f"Connection error during sync: {e}")
            return f"Error: {e}"
