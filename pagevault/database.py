"""Database schema and connection management for SQLite."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from pagevault import config


def _ensure_column(cursor: sqlite3.Cursor, table: str, column: str, ddl: str) -> None:
    """
    Add a column to an existing table if an older schema lacks it.
    """
    cursor.execute(f"PRAGMA table_info({table})")
    existing = {row["name"] for row in cursor.fetchall()}
    if column not in existing:
        cursor.execute(f"ALTER TABLE {table} ADD COLUMN {column} {ddl}")


def init_database() -> None:
    """
    Initialize database and create tables if they don't exist.
    """
    db_path = Path(config.DATABASE_PATH)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_db_connection() as conn:
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS users (
                user_id INTEGER PRIMARY KEY AUTOINCREMENT,
                username TEXT UNIQUE NOT NULL,
                role TEXT NOT NULL DEFAULT 'user',
                status TEXT NOT NULL DEFAULT 'active',
                storage_limit INTEGER NOT NULL,
                api_key TEXT UNIQUE,
                created_at TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS files (
                file_id TEXT PRIMARY KEY,
                owner_id INTEGER NOT NULL,
                object_key TEXT NOT NULL UNIQUE,
                filename TEXT NOT NULL,
                display_name TEXT NOT NULL,
                content_kind TEXT NOT NULL,
                content_type TEXT NOT NULL,
                size INTEGER NOT NULL,
                text TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                FOREIGN KEY(owner_id) REFERENCES users(user_id) ON DELETE CASCADE
            )
        """)

        _ensure_column(cursor, "files", "description", "TEXT")
        _ensure_column(cursor, "files", "text_extracted_at", "TEXT")
        _ensure_column(cursor, "files", "vector_indexed_at", "TEXT")

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS tags (
                tag_id INTEGER PRIMARY KEY AUTOINCREMENT,
                owner_id INTEGER NOT NULL,
                name TEXT NOT NULL,
                created_at TEXT NOT NULL,
                UNIQUE(owner_id, name),
                FOREIGN KEY(owner_id) REFERENCES users(user_id) ON DELETE CASCADE
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS file_tags (
                file_id TEXT NOT NULL,
                tag_id INTEGER NOT NULL,
                created_at TEXT NOT NULL,
                PRIMARY KEY(file_id, tag_id),
                FOREIGN KEY(file_id) REFERENCES files(file_id) ON DELETE CASCADE,
                FOREIGN KEY(tag_id) REFERENCES tags(tag_id) ON DELETE CASCADE
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS shares (
                share_id TEXT PRIMARY KEY,
                file_id TEXT NOT NULL UNIQUE,
                is_enabled INTEGER NOT NULL DEFAULT 1,
                visit_count INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL,
                FOREIGN KEY(file_id) REFERENCES files(file_id) ON DELETE CASCADE
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_files_owner_created ON files(owner_id, created_at)
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_files_text_extracted ON files(text_extracted_at)
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_files_vector_indexed ON files(vector_indexed_at)
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_users_role ON users(role, user_id)
        """)

        conn.commit()


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if value is not None else None


def connect() -> sqlite3.Connection:
    """
    Open a connection the caller must close.

    Repository methods that accept an optional conn use this when none is
    passed, and close it themselves in a finally block.
    """
    conn = sqlite3.connect(config.DATABASE_PATH, timeout=30)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    # SQLite LIKE and lower() only fold ASCII
    conn.create_function("casefold", 1, _casefold, deterministic=True)
    return conn


@contextmanager
def get_db_connection() -> Generator[sqlite3.Connection, None, None]:
    """
    Context manager for database connections.
    """
    conn = connect()
    try:
        yield conn
    finally:
        conn.close()
