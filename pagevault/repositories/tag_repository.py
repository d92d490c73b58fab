"""Tag repository for database operations."""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from common.logging_config import get_logger
from pagevault.database import get_db_connection
from pagevault.utils import get_current_timestamp

logger = get_logger(__name__)


@dataclass
class Tag:
    tag_id: int
    owner_id: int
    name: str
    created_at: datetime


def _row_to_tag(row) -> Tag:
    return Tag(
        tag_id=row["tag_id"],
        owner_id=row["owner_id"],
        name=row["name"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


class TagRepository:
    @staticmethod
    def create_tag(owner_id: int, name: str) -> Tag:
        """
        Insert a tag. Raises sqlite3.IntegrityError if the owner already has the name.
        """
        now = get_current_timestamp()
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO tags (owner_id, name, created_at) VALUES (?, ?, ?)",
                (owner_id, name, now)
            )
            conn.commit()
            tag_id = cursor.lastrowid

        logger.debug(f"Tag created: {name} [tag_id={tag_id}] [owner_id={owner_id}]")
        return Tag(tag_id=tag_id, owner_id=owner_id, name=name, created_at=datetime.fromisoformat(now))

    @staticmethod
    def get_by_id(tag_id: int) -> Optional[Tag]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT tag_id, owner_id, name, created_at FROM tags WHERE tag_id = ?",
                (tag_id,)
            )
            row = cursor.fetchone()
            return _row_to_tag(row) if row else None

    @staticmethod
    def list_for_owner(owner_id: int) -> List[Tag]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT tag_id, owner_id, name, created_at FROM tags WHERE owner_id = ? ORDER BY name ASC",
                (owner_id,)
            )
            return [_row_to_tag(row) for row in cursor.fetchall()]

    @staticmethod
    def rename_tag(tag_id: int, name: str) -> None:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("UPDATE tags SET name = ? WHERE tag_id = ?", (name, tag_id))
            conn.commit()

    @staticmethod
    def delete_tag(tag_id: int) -> None:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM tags WHERE tag_id = ?", (tag_id,))
            conn.commit()

    @staticmethod
    def attach(file_id: str, tag_id: int) -> None:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT OR IGNORE INTO file_tags (file_id, tag_id, created_at) VALUES (?, ?, ?)",
                (file_id, tag_id, get_current_timestamp())
            )
            conn.commit()

    @staticmethod
    def detach(file_id: str, tag_id: int) -> None:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM file_tags WHERE file_id = ? AND tag_id = ?", (file_id, tag_id))
            conn.commit()

    @staticmethod
    def get_tags_for_file(file_id: str) -> List[str]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT t.name FROM tags t
                JOIN file_tags ft ON ft.tag_id = t.tag_id
                WHERE ft.file_id = ?
                ORDER BY t.name
                """,
                (file_id,)
            )
            return [row["name"] for row in cursor.fetchall()]

    @staticmethod
    def get_tags_for_files(file_ids: List[str]) -> Dict[str, List[str]]:
        if not file_ids:
            return {}

        placeholders = ",".join("?" for _ in file_ids)
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT ft.file_id, t.name FROM tags t
                JOIN file_tags ft ON ft.tag_id = t.tag_id
                WHERE ft.file_id IN ({placeholders})
                ORDER BY t.name
                """,
                file_ids
            )
            result: Dict[str, List[str]] = {file_id: [] for file_id in file_ids}
            for row in cursor.fetchall():
                result[row["file_id"]].append(row["name"])
            return result
