"""HTTP client for an OpenAI-compatible embeddings endpoint."""

from typing import List, Optional

import httpx

from common.logging_config import get_logger
from pagevault import config
from pagevault.exceptions import IndexDegradedError

logger = get_logger(__name__)


class EmbeddingClient:
    """
    Client turning text into a single embedding vector.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        max_chars: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize embedding client.

        Args:
            base_url: API base, e.g. "https://api.openai.com/v1" (defaults to config)
            api_key: Bearer token sent with each request, if any
            model: Embedding model name
            timeout: Per-request timeout in seconds
            max_chars: Input is truncated to this many characters
            transport: Optional httpx transport, used by tests
        """
        self.base_url = (base_url or config.EMBEDDING_API_URL or "").rstrip("/")
        self.api_key = api_key if api_key is not None else config.EMBEDDING_API_KEY
        self.model = model or config.EMBEDDING_MODEL
        self.max_chars = max_chars or config.EMBEDDING_MAX_CHARS

        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout or config.EMBEDDING_TIMEOUT_SECONDS),
            headers=headers,
            transport=transport,
        )

    async def embed(self, text: str) -> List[float]:
        """
        Embed text.

        Raises:
            IndexDegradedError: On transport errors, non-2xx responses or a malformed body
        """
        if not self.base_url:
            raise IndexDegradedError("Embedding backend is not configured")

        payload = {"model": self.model, "input": text[: self.max_chars]}
        try:
            response = await self._client.post(f"{self.base_url}/embeddings", json=payload)
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Embedding request failed: {e}")
            raise IndexDegradedError(f"Embedding request failed: {e}") from e

        try:
            vector = body["data"][0]["embedding"]
        except (KeyError, IndexError, TypeError) as e:
            raise IndexDegradedError("Embedding response has no vector") from e

        if not isinstance(vector, list) or not vector:
            raise IndexDegradedError("Embedding response has an empty vector")

        return [float(value) for value in vector]

    async def close(self) -> None:
        await self._client.aclose()
