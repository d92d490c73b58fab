"""API routes package."""

from pagevault.routes.admin_routes import router as admin_router
from pagevault.routes.auth_routes import router as auth_router
from pagevault.routes.file_routes import router as file_router
from pagevault.routes.share_routes import router as share_router
from pagevault.routes.tag_routes import router as tag_router

__all__ = ["admin_router", "auth_router", "file_router", "share_router", "tag_router"]
