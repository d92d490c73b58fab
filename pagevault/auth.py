"""Authentication utilities: admin bootstrap and request user resolution."""

import asyncio
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, Header, Request

from common.logging_config import get_logger
from pagevault import config
from pagevault.exceptions import AccountRestrictedError, InvalidAPIKeyError, UnauthorizedAccessError
from pagevault.repositories.user_repository import (
    ROLE_ADMIN,
    STATUS_LOCKED,
    STATUS_PENDING,
    User,
    UserRepository,
)

logger = get_logger(__name__)

_READ_METHODS = {"GET", "HEAD", "OPTIONS"}


def bootstrap_admin() -> Optional[User]:
    """
    Create the configured admin account if no admin exists yet.

    Returns:
        The created admin, or None when nothing was configured or an admin already exists
    """
    if not config.ADMIN_API_KEY:
        return None
    if UserRepository.get_first_admin() is not None:
        return None
    if UserRepository.get_by_api_key(config.ADMIN_API_KEY) is not None:
        return None

    admin = UserRepository.create_user(
        username=config.ADMIN_USERNAME,
        api_key=config.ADMIN_API_KEY,
        storage_limit=config.DEFAULT_STORAGE_LIMIT,
        created_at=datetime.now(timezone.utc),
        role=ROLE_ADMIN,
    )
    logger.info(f"Bootstrapped admin account {admin.username} [user_id={admin.user_id}]")
    return admin


async def get_current_user(request: Request, authorization: Optional[str] = Header(None)) -> User:
    """
    FastAPI dependency resolving the bearer API Key to a user.

    Locked accounts are refused outright; pending accounts may only read.

    Raises:
        InvalidAPIKeyError: Header missing, malformed or key unknown
        AccountRestrictedError: Account locked, or pending on a write request
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise InvalidAPIKeyError("Missing or invalid authorization header")

    api_key = authorization[len("Bearer "):].strip()
    if not api_key:
        raise InvalidAPIKeyError("Missing or invalid authorization header")

    user = await asyncio.to_thread(UserRepository.get_by_api_key, api_key)
    if user is None:
        raise InvalidAPIKeyError("Invalid API key")

    request.state.user_id = user.user_id

    if user.status == STATUS_LOCKED:
        raise AccountRestrictedError("Account is locked")
    if user.status == STATUS_PENDING and request.method not in _READ_METHODS:
        raise AccountRestrictedError("Account is pending approval and is read-only")

    return user


async def get_admin_user(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise UnauthorizedAccessError("Admin role required")
    return user
