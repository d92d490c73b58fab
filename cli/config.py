"""Settings for the PageVault CLI: server address, credentials and retry policy."""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from common.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path(os.environ.get("PAGEVAULT_CLI_CONFIG", Path.home() / ".pagevault" / "config.json"))

DEFAULTS = {
    "server_url": "http://localhost:8000",
    "timeout": 30,
    "max_retries": 3,
    "retry_backoff_multiplier": 2,
}


class Config:
    """
    JSON-backed CLI settings.

    Environment variables win over the file: PAGEVAULT_URL for the server and
    PAGEVAULT_API_KEY for the key, so one-shot invocations need no login. The
    file is only written by save(); it holds the API key, so it is created
    with owner-only permissions.
    """

    def __init__(self, config_path: Path = DEFAULT_CONFIG_PATH):
        self.config_path = Path(config_path)
        self.data = {**DEFAULTS, **self._read()}

    def _read(self) -> dict:
        try:
            raw = self.config_path.read_text()
        except FileNotFoundError:
            return {}
        except OSError as e:
            logger.warning(f"Cannot read CLI config {self.config_path}: {e}")
            return {}

        try:
            stored = json.loads(raw)
            if not isinstance(stored, dict):
                raise ValueError("top-level value is not an object")
        except ValueError as e:
            backup = self.config_path.with_suffix(".json.bak")
            logger.warning(f"CLI config is corrupt, moved to {backup}: {e}")
            self.config_path.replace(backup)
            return {}

        # files written by older releases stored host and port separately
        if "server_url" not in stored and "server_host" in stored:
            stored["server_url"] = f"http://{stored.pop('server_host')}:{stored.pop('server_port', 8000)}"
        return stored

    def save(self) -> None:
        """Write settings atomically; failures are logged, not raised."""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.config_path.parent, prefix=".config-")
            with os.fdopen(fd, "w") as f:
                json.dump(self.data, f, indent=2)
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self.config_path)
        except OSError as e:
            logger.error(f"Failed to save CLI config to {self.config_path}: {e}")

    def get_api_key(self) -> Optional[str]:
        return os.environ.get("PAGEVAULT_API_KEY") or self.data.get("api_key")

    def set_api_key(self, key: str) -> None:
        self.data["api_key"] = key
        self.save()

    def get_base_url(self) -> str:
        return (os.environ.get("PAGEVAULT_URL") or self.data["server_url"]).rstrip("/")

    def get_timeout(self) -> float:
        return float(self.data["timeout"])

    def get_retry_config(self) -> dict:
        """
        Returns:
            Dictionary with 'max_retries' and 'retry_backoff_multiplier'
        """
        return {
            "max_retries": int(self.data["max_retries"]),
            "retry_backoff_multiplier": self.data["retry_backoff_multiplier"],
        }
