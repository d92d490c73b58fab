"""Project-wide constants shared by the server and the CLI."""

MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024  # 10 MiB per document
DEFAULT_STORAGE_LIMIT_BYTES: int = 100 * 1024 * 1024  # 100 MiB per user

HTML_EXTENSIONS = (".html", ".htm")
MARKDOWN_EXTENSIONS = (".md", ".markdown")
SUPPORTED_FILE_EXTENSIONS = HTML_EXTENSIONS + MARKDOWN_EXTENSIONS

ORIGINAL_FILENAME_METADATA_KEY = "original_filename"

SEARCH_MODE_VECTOR = "vector"
SEARCH_MODE_METADATA = "metadata"
SEARCH_MODES = (SEARCH_MODE_VECTOR, SEARCH_MODE_METADATA)
