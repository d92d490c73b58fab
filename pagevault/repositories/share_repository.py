"""Share repository for database operations."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from common.logging_config import get_logger
from pagevault.database import get_db_connection
from pagevault.utils import get_current_timestamp

logger = get_logger(__name__)


@dataclass
class Share:
    share_id: str
    file_id: str
    is_enabled: bool
    visit_count: int
    created_at: datetime


def _row_to_share(row) -> Share:
    return Share(
        share_id=row["share_id"],
        file_id=row["file_id"],
        is_enabled=bool(row["is_enabled"]),
        visit_count=row["visit_count"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


class ShareRepository:
    @staticmethod
    def create_share(share_id: str, file_id: str) -> Share:
        """
        Insert an enabled share. Raises sqlite3.IntegrityError if the file already has one.
        """
        now = get_current_timestamp()
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO shares (share_id, file_id, is_enabled, visit_count, created_at) VALUES (?, ?, 1, 0, ?)",
                (share_id, file_id, now)
            )
            conn.commit()

        logger.debug(f"Share created [share_id={share_id}] [file_id={file_id}]")
        return Share(share_id=share_id, file_id=file_id, is_enabled=True, visit_count=0,
                     created_at=datetime.fromisoformat(now))

    @staticmethod
    def get_by_file(file_id: str) -> Optional[Share]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT share_id, file_id, is_enabled, visit_count, created_at FROM shares WHERE file_id = ?",
                (file_id,)
            )
            row = cursor.fetchone()
            return _row_to_share(row) if row else None

    @staticmethod
    def get_by_share_id(share_id: str) -> Optional[Share]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT share_id, file_id, is_enabled, visit_count, created_at FROM shares WHERE share_id = ?",
                (share_id,)
            )
            row = cursor.fetchone()
            return _row_to_share(row) if row else None

    @staticmethod
    def set_enabled(file_id: str, enabled: bool) -> None:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE shares SET is_enabled = ? WHERE file_id = ?",
                (1 if enabled else 0, file_id)
            )
            conn.commit()

    @staticmethod
    def increment_visits(share_id: str) -> None:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE shares SET visit_count = visit_count + 1 WHERE share_id = ?",
                (share_id,)
            )
            conn.commit()
