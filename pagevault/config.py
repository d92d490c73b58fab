"""Configuration settings for the PageVault server."""

import os

from common.constants import DEFAULT_STORAGE_LIMIT_BYTES


def _optional(name: str):
    value = os.environ.get(name, "").strip()
    return value or None


DATABASE_PATH = os.environ.get("PAGEVAULT_DATABASE_PATH", "/app/data/metadata.db")

SERVER_HOST = os.environ.get("PAGEVAULT_HOST", "0.0.0.0")

SERVER_PORT = int(os.environ.get("PAGEVAULT_PORT", "8000"))

DEFAULT_STORAGE_LIMIT = int(os.environ.get("PAGEVAULT_DEFAULT_STORAGE_LIMIT", str(DEFAULT_STORAGE_LIMIT_BYTES)))

# Optional first admin, created on startup when no admin exists yet
ADMIN_API_KEY = _optional("PAGEVAULT_ADMIN_API_KEY")
ADMIN_USERNAME = os.environ.get("PAGEVAULT_ADMIN_USERNAME", "admin")

# Object store (any S3-compatible endpoint, e.g. R2 or MinIO)
S3_ENDPOINT_URL = _optional("PAGEVAULT_S3_ENDPOINT_URL")
S3_BUCKET = os.environ.get("PAGEVAULT_S3_BUCKET", "pagevault")
S3_REGION = os.environ.get("PAGEVAULT_S3_REGION", "auto")
S3_ACCESS_KEY_ID = _optional("PAGEVAULT_S3_ACCESS_KEY_ID")
S3_SECRET_ACCESS_KEY = _optional("PAGEVAULT_S3_SECRET_ACCESS_KEY")
S3_CONNECT_TIMEOUT_SECONDS = float(os.environ.get("PAGEVAULT_S3_CONNECT_TIMEOUT", "5"))
S3_READ_TIMEOUT_SECONDS = float(os.environ.get("PAGEVAULT_S3_READ_TIMEOUT", "30"))
S3_MAX_ATTEMPTS = int(os.environ.get("PAGEVAULT_S3_MAX_ATTEMPTS", "3"))

# Embedding backend (OpenAI-compatible /embeddings endpoint); disabled when unset
EMBEDDING_API_URL = _optional("PAGEVAULT_EMBEDDING_API_URL")
EMBEDDING_API_KEY = _optional("PAGEVAULT_EMBEDDING_API_KEY")
EMBEDDING_MODEL = os.environ.get("PAGEVAULT_EMBEDDING_MODEL", "text-embedding-3-small")
EMBEDDING_TIMEOUT_SECONDS = float(os.environ.get("PAGEVAULT_EMBEDDING_TIMEOUT", "15"))
EMBEDDING_MAX_CHARS = int(os.environ.get("PAGEVAULT_EMBEDDING_MAX_CHARS", "8000"))

# Vector index (Qdrant); disabled when unset
QDRANT_URL = _optional("PAGEVAULT_QDRANT_URL")
QDRANT_API_KEY = _optional("PAGEVAULT_QDRANT_API_KEY")
QDRANT_COLLECTION = os.environ.get("PAGEVAULT_QDRANT_COLLECTION", "pagevault_files")
QDRANT_TIMEOUT_SECONDS = int(os.environ.get("PAGEVAULT_QDRANT_TIMEOUT", "10"))
VECTOR_TOP_K = int(os.environ.get("PAGEVAULT_VECTOR_TOP_K", "20"))

# Content extraction budgets
HTML_INPUT_LIMIT = 100_000
TEXT_OUTPUT_LIMIT = 30_000
SNIPPET_RADIUS = 80

# Reconciliation and backlog
SYNC_INTERVAL_SECONDS = int(os.environ.get("PAGEVAULT_SYNC_INTERVAL", str(6 * 3600)))
RECONCILE_PAGE_SIZE = int(os.environ.get("PAGEVAULT_RECONCILE_PAGE_SIZE", "500"))
RECONCILE_READ_BYTES = int(os.environ.get("PAGEVAULT_RECONCILE_READ_BYTES", str(64 * 1024)))
RECONCILE_KEYSET_LIMIT = int(os.environ.get("PAGEVAULT_RECONCILE_KEYSET_LIMIT", "1000000"))
REINDEX_BATCH_SIZE = int(os.environ.get("PAGEVAULT_REINDEX_BATCH_SIZE", "50"))
