"""File repository for database operations."""

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Set, Tuple

from common.logging_config import get_logger
from pagevault.database import connect, get_db_connection
from pagevault.utils import escape_like, get_current_timestamp

logger = get_logger(__name__)


@dataclass
class File:
    file_id: str
    owner_id: int
    object_key: str
    filename: str
    display_name: str
    content_kind: str
    content_type: str
    size: int
    description: Optional[str]
    text: Optional[str]
    text_extracted_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime


_FILE_COLUMNS = (
    "f.file_id, f.owner_id, f.object_key, f.filename, f.display_name, f.content_kind, "
    "f.content_type, f.size, f.description, f.text, f.text_extracted_at, f.created_at, f.updated_at"
)

_TAG_FILTER = """
    AND EXISTS (
        SELECT 1 FROM file_tags ft
        JOIN tags t ON ft.tag_id = t.tag_id
        WHERE ft.file_id = f.file_id AND t.name = ?
    )
"""


def _row_to_file(row: sqlite3.Row) -> File:
    extracted_at = row["text_extracted_at"]
    return File(
        file_id=row["file_id"],
        owner_id=row["owner_id"],
        object_key=row["object_key"],
        filename=row["filename"],
        display_name=row["display_name"],
        content_kind=row["content_kind"],
        content_type=row["content_type"],
        size=row["size"],
        description=row["description"],
        text=row["text"],
        text_extracted_at=datetime.fromisoformat(extracted_at) if extracted_at else None,
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


class FileRepository:
    @staticmethod
    def create_file(
        file_id: str,
        owner_id: int,
        object_key: str,
        filename: str,
        display_name: str,
        content_kind: str,
        content_type: str,
        size: int,
        text: Optional[str],
        description: Optional[str] = None,
        conn=None
    ) -> File:
        """
        Insert a file record.

        text=None means extraction did not run, which leaves the file in the
        reindex backlog. Raises sqlite3.IntegrityError if object_key is taken.
        """
        should_close = conn is None
        if conn is None:
            conn = connect()

        try:
            now = get_current_timestamp()
            extracted_at = now if text is not None else None
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO files (file_id, owner_id, object_key, filename, display_name, content_kind,
                                   content_type, size, description, text, text_extracted_at, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (file_id, owner_id, object_key, filename, display_name, content_kind,
                 content_type, size, description, text, extracted_at, now, now)
            )
            if should_close:
                conn.commit()

            logger.debug(f"File record created [file_id={file_id}] [object_key={object_key}]")
            created = datetime.fromisoformat(now)
            return File(
                file_id=file_id,
                owner_id=owner_id,
                object_key=object_key,
                filename=filename,
                display_name=display_name,
                content_kind=content_kind,
                content_type=content_type,
                size=size,
                description=description,
                text=text,
                text_extracted_at=created if extracted_at else None,
                created_at=created,
                updated_at=created,
            )
        finally:
            if should_close:
                conn.close()

    @staticmethod
    def get_by_id(file_id: str) -> Optional[File]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {_FILE_COLUMNS} FROM files f WHERE f.file_id = ?", (file_id,))
            row = cursor.fetchone()
            return _row_to_file(row) if row else None

    @staticmethod
    def get_by_ids(file_ids: List[str], owner_id: int, tag: Optional[str] = None) -> Dict[str, File]:
        """
        Fetch the owner's files among file_ids, optionally restricted to a tag name.
        """
        if not file_ids:
            return {}

        placeholders = ",".join("?" for _ in file_ids)
        query = f"SELECT {_FILE_COLUMNS} FROM files f WHERE f.owner_id = ? AND f.file_id IN ({placeholders})"
        params: list = [owner_id, *file_ids]
        if tag:
            query += _TAG_FILTER
            params.append(tag)

        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return {row["file_id"]: _row_to_file(row) for row in cursor.fetchall()}

    @staticmethod
    def get_all_object_keys() -> Set[str]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT object_key FROM files")
            return {row["object_key"] for row in cursor.fetchall()}

    @staticmethod
    def count_files() -> int:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) AS n FROM files")
            return cursor.fetchone()["n"]

    @staticmethod
    def exists_by_object_key(object_key: str, conn=None) -> bool:
        should_close = conn is None
        if conn is None:
            conn = connect()

        try:
            cursor = conn.cursor()
            cursor.execute("SELECT 1 FROM files WHERE object_key = ?", (object_key,))
            return cursor.fetchone() is not None
        finally:
            if should_close:
                conn.close()

    @staticmethod
    def list_by_owner(owner_id: int, tag: Optional[str] = None) -> List[File]:
        """
        List the owner's files, newest first.
        """
        query = f"SELECT {_FILE_COLUMNS} FROM files f WHERE f.owner_id = ?"
        params: list = [owner_id]
        if tag:
            query += _TAG_FILTER
            params.append(tag)
        query += " ORDER BY f.created_at DESC, f.rowid DESC"

        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return [_row_to_file(row) for row in cursor.fetchall()]

    @staticmethod
    def search_metadata(owner_id: int, term: str, tag: Optional[str] = None) -> List[File]:
        """
        Case-insensitive substring match on display name or description, newest first.
        """
        pattern = f"%{escape_like(term.casefold())}%"
        query = (
            f"SELECT {_FILE_COLUMNS} FROM files f WHERE f.owner_id = ? "
            "AND (casefold(f.display_name) LIKE ? ESCAPE '\\' OR casefold(f.description) LIKE ? ESCAPE '\\')"
        )
        params: list = [owner_id, pattern, pattern]
        if tag:
            query += _TAG_FILTER
            params.append(tag)
        query += " ORDER BY f.created_at DESC, f.rowid DESC"

        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return [_row_to_file(row) for row in cursor.fetchall()]

    @staticmethod
    def get_files_missing_text(limit: int) -> List[File]:
        """
        Files never extracted and holding no text, oldest first.
        """
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT {_FILE_COLUMNS} FROM files f
                WHERE (f.text IS NULL OR f.text = '') AND f.text_extracted_at IS NULL
                ORDER BY f.created_at ASC, f.rowid ASC
                LIMIT ?
                """,
                (limit,)
            )
            return [_row_to_file(row) for row in cursor.fetchall()]

    @staticmethod
    def get_files_missing_vector(limit: int) -> List[File]:
        """
        Files holding text whose vector entry was never written or is stale, oldest first.
        """
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT {_FILE_COLUMNS} FROM files f
                WHERE f.text IS NOT NULL AND f.text != '' AND f.vector_indexed_at IS NULL
                ORDER BY f.created_at ASC, f.rowid ASC
                LIMIT ?
                """,
                (limit,)
            )
            return [_row_to_file(row) for row in cursor.fetchall()]

    @staticmethod
    def mark_vector_indexed(file_id: str, indexed_at: str) -> None:
        """
        Record a vector write, unless text or display name changed after indexed_at.
        """
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE files SET vector_indexed_at = ? WHERE file_id = ? AND updated_at <= ?",
                (indexed_at, file_id, indexed_at)
            )
            conn.commit()

    @staticmethod
    def update_file_text(file_id: str, text: str, title: Optional[str] = None) -> None:
        """
        Store extracted text and mark the file extracted; title replaces display_name when given.
        """
        now = get_current_timestamp()
        with get_db_connection() as conn:
            cursor = conn.cursor()
            if title:
                cursor.execute(
                    """
                    UPDATE files SET text = ?, display_name = ?, text_extracted_at = ?, vector_indexed_at = NULL,
                                     updated_at = ?
                    WHERE file_id = ?
                    """,
                    (text, title, now, now, file_id)
                )
            else:
                cursor.execute(
                    "UPDATE files SET text = ?, text_extracted_at = ?, vector_indexed_at = NULL, updated_at = ? WHERE file_id = ?",
                    (text, now, now, file_id)
                )
            conn.commit()
        logger.debug(f"File text updated [file_id={file_id}] chars={len(text)}")

    @staticmethod
    def update_details(
        file_id: str,
        display_name: Optional[str] = None,
        description: Optional[str] = None
    ) -> None:
        assignments = []
        params: list = []
        if display_name is not None:
            assignments.append("display_name = ?")
            assignments.append("vector_indexed_at = NULL")
            params.append(display_name)
        if description is not None:
            assignments.append("description = ?")
            params.append(description)
        if not assignments:
            return

        assignments.append("updated_at = ?")
        params.extend([get_current_timestamp(), file_id])

        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"UPDATE files SET {', '.join(assignments)} WHERE file_id = ?", params)
            conn.commit()

    @staticmethod
    def delete_file(file_id: str, conn=None) -> None:
        logger.debug(f"Deleting file record [file_id={file_id}]")
        should_close = conn is None
        if conn is None:
            conn = connect()

        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM files WHERE file_id = ?", (file_id,))
            if should_close:
                conn.commit()
        finally:
            if should_close:
                conn.close()

    @staticmethod
    def get_usage(owner_id: int, conn=None) -> Tuple[int, int]:
        """
        Return (bytes used, file count) for an owner.
        """
        should_close = conn is None
        if conn is None:
            conn = connect()

        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT COALESCE(SUM(size), 0) AS used, COUNT(*) AS n FROM files WHERE owner_id = ?",
                (owner_id,)
            )
            row = cursor.fetchone()
            return row["used"], row["n"]
        finally:
            if should_close:
                conn.close()
