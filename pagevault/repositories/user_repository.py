"""User repository for database operations."""

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from common.logging_config import get_logger
from pagevault.database import connect, get_db_connection

logger = get_logger(__name__)

ROLE_USER = "user"
ROLE_ADMIN = "admin"

STATUS_ACTIVE = "active"
STATUS_PENDING = "pending"
STATUS_LOCKED = "locked"


@dataclass
class User:
    user_id: int
    username: str
    role: str
    status: str
    storage_limit: int
    api_key: Optional[str]
    created_at: datetime

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def _row_to_user(row: sqlite3.Row) -> User:
    return User(
        user_id=row["user_id"],
        username=row["username"],
        role=row["role"],
        status=row["status"],
        storage_limit=row["storage_limit"],
        api_key=row["api_key"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


_USER_COLUMNS = "user_id, username, role, status, storage_limit, api_key, created_at"


class UserRepository:
    @staticmethod
    def create_user(
        username: str,
        api_key: Optional[str],
        storage_limit: int,
        created_at: datetime,
        role: str = ROLE_USER,
        status: str = STATUS_ACTIVE,
    ) -> User:
        logger.debug(f"Creating user: {username} [role={role}]")

        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO users (username, role, status, storage_limit, api_key, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (username, role, status, storage_limit, api_key, created_at.isoformat())
            )
            conn.commit()
            user_id = cursor.lastrowid

        logger.info(f"User created: {username} [user_id={user_id}]")
        return User(
            user_id=user_id,
            username=username,
            role=role,
            status=status,
            storage_limit=storage_limit,
            api_key=api_key,
            created_at=created_at,
        )

    @staticmethod
    def get_by_id(user_id: int) -> Optional[User]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE user_id = ?", (user_id,))
            row = cursor.fetchone()
            return _row_to_user(row) if row else None

    @staticmethod
    def get_by_api_key(api_key: str) -> Optional[User]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE api_key = ?", (api_key,))
            row = cursor.fetchone()
            return _row_to_user(row) if row else None

    @staticmethod
    def get_first_admin(conn=None) -> Optional[User]:
        """
        Return the lowest-numbered admin, the owner of adopted root objects.
        """
        should_close = conn is None
        if conn is None:
            conn = connect()

        try:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE role = ? ORDER BY user_id ASC LIMIT 1",
                (ROLE_ADMIN,)
            )
            row = cursor.fetchone()
            return _row_to_user(row) if row else None
        finally:
            if should_close:
                conn.close()

    @staticmethod
    def exists(user_id: int, conn=None) -> bool:
        should_close = conn is None
        if conn is None:
            conn = connect()

        try:
            cursor = conn.cursor()
            cursor.execute("SELECT 1 FROM users WHERE user_id = ?", (user_id,))
            return cursor.fetchone() is not None
        finally:
            if should_close:
                conn.close()
