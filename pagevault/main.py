"""Entry point for the PageVault server."""

import time
import uuid

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from common.logging_config import setup_logging
from pagevault import config, service_locator
from pagevault.auth import bootstrap_admin
from pagevault.database import init_database
from pagevault.embedding_client import EmbeddingClient
from pagevault.exceptions import (
    AccountRestrictedError,
    FileNotFoundError,
    InvalidAPIKeyError,
    PageVaultException,
    QuotaExceededError,
    ShareNotFoundError,
    StorageError,
    SyncInProgressError,
    TagAlreadyExistsError,
    TagNotFoundError,
    UnauthorizedAccessError,
    ValidationError,
)
from pagevault.indexing_queue import IndexingQueue
from pagevault.object_store import ObjectStore
from pagevault.routes.admin_routes import router as admin_router
from pagevault.routes.auth_routes import router as auth_router
from pagevault.routes.file_routes import router as file_router
from pagevault.routes.share_routes import router as share_router
from pagevault.routes.tag_routes import router as tag_router
from pagevault.sync_task import SyncTask
from pagevault.vector_index import VectorIndex

logger = setup_logging('pagevault')

app = FastAPI(
    title="PageVault",
    description="Document vault for HTML snapshots and Markdown with share links and hybrid search",
    version="1.0.0"
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    logger.info(
        f"Request started: {request.method} {request.url.path} [request_id={request_id}]"
    )

    response = await call_next(request)

    duration = time.time() - start_time
    user_id = getattr(request.state, 'user_id', None)

    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s "
        f"[request_id={request_id}] [user_id={user_id or 'anonymous'}]"
    )

    response.headers["X-Request-ID"] = request_id

    return response


@app.on_event("startup")
async def startup_event():
    """
    Initialize database, adapters and background tasks on application startup.
    """
    logger.info("PageVault server starting up...")

    init_database()
    logger.info("Database initialized")

    bootstrap_admin()

    service_locator.set_object_store(ObjectStore())
    logger.info(f"Object store configured [bucket={config.S3_BUCKET}]")

    if config.EMBEDDING_API_URL:
        service_locator.set_embedding_client(EmbeddingClient())
        logger.info(f"Embedding backend configured [model={config.EMBEDDING_MODEL}]")
    else:
        logger.info("Embedding backend not configured - vector search disabled")

    if config.QDRANT_URL:
        service_locator.set_vector_index(VectorIndex())
        logger.info(f"Vector index configured [collection={config.QDRANT_COLLECTION}]")
    else:
        logger.info("Vector index not configured - vector search disabled")

    service_locator.set_indexing_queue(IndexingQueue())

    sync_task = SyncTask()
    service_locator.set_sync_task(sync_task)
    await sync_task.start()
    logger.info("Background sync task started")


@app.on_event("shutdown")
async def shutdown_event():
    """
    Cleanup resources on application shutdown.
    """
    logger.info("PageVault server shutting down...")

    sync_task = service_locator.get_sync_task()
    if sync_task:
        await sync_task.stop()
        logger.info("Sync task stopped")

    await service_locator.get_indexing_queue().drain()
    logger.info("Indexing queue drained")

    embedding_client = service_locator.get_embedding_client()
    if embedding_client:
        await embedding_client.close()

    vector_index = service_locator.get_vector_index()
    if vector_index:
        await vector_index.close()


def _error_response(exc: Exception, status_code: int, code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "code": code})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Validation error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return _error_response(exc, status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR")


@app.exception_handler(QuotaExceededError)
async def quota_exceeded_handler(request: Request, exc: QuotaExceededError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    user_id = getattr(request.state, 'user_id', 'unknown')
    logger.warning(
        f"Quota exceeded: {exc} [request_id={request_id}] [user_id={user_id}] path={request.url.path}"
    )
    return _error_response(exc, status.HTTP_403_FORBIDDEN, "QUOTA_EXCEEDED")


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Storage unavailable error: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=True
    )
    return _error_response(exc, status.HTTP_503_SERVICE_UNAVAILABLE, "STORAGE_UNAVAILABLE")


@app.exception_handler(InvalidAPIKeyError)
async def invalid_api_key_handler(request: Request, exc: InvalidAPIKeyError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Invalid API key error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return _error_response(exc, status.HTTP_401_UNAUTHORIZED, "INVALID_API_KEY")


@app.exception_handler(AccountRestrictedError)
async def account_restricted_handler(request: Request, exc: AccountRestrictedError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    user_id = getattr(request.state, 'user_id', 'unknown')
    logger.warning(
        f"Account restricted: {exc} [request_id={request_id}] [user_id={user_id}] path={request.url.path}"
    )
    return _error_response(exc, status.HTTP_403_FORBIDDEN, "ACCOUNT_RESTRICTED")


@app.exception_handler(FileNotFoundError)
async def file_not_found_handler(request: Request, exc: FileNotFoundError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"File not found error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return _error_response(exc, status.HTTP_404_NOT_FOUND, "FILE_NOT_FOUND")


@app.exception_handler(UnauthorizedAccessError)
async def unauthorized_access_handler(request: Request, exc: UnauthorizedAccessError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    user_id = getattr(request.state, 'user_id', 'unknown')
    logger.warning(
        f"Unauthorized access error: {exc} [request_id={request_id}] [user_id={user_id}] path={request.url.path}"
    )
    return _error_response(exc, status.HTTP_403_FORBIDDEN, "UNAUTHORIZED_ACCESS")


@app.exception_handler(TagNotFoundError)
async def tag_not_found_handler(request: Request, exc: TagNotFoundError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Tag not found error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return _error_response(exc, status.HTTP_404_NOT_FOUND, "TAG_NOT_FOUND")


@app.exception_handler(TagAlreadyExistsError)
async def tag_already_exists_handler(request: Request, exc: TagAlreadyExistsError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Tag already exists error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return _error_response(exc, status.HTTP_400_BAD_REQUEST, "TAG_ALREADY_EXISTS")


@app.exception_handler(ShareNotFoundError)
async def share_not_found_handler(request: Request, exc: ShareNotFoundError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Share not found error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return _error_response(exc, status.HTTP_404_NOT_FOUND, "SHARE_NOT_FOUND")


@app.exception_handler(SyncInProgressError)
async def sync_in_progress_handler(request: Request, exc: SyncInProgressError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Sync in progress: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return _error_response(exc, status.HTTP_409_CONFLICT, "SYNC_IN_PROGRESS")


@app.exception_handler(PageVaultException)
async def pagevault_exception_handler(request: Request, exc: PageVaultException):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"PageVault exception: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=True
    )
    return _error_response(exc, status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR")


app.include_router(auth_router)
app.include_router(file_router)
app.include_router(tag_router)
app.include_router(share_router)
app.include_router(admin_router)


@app.get("/")
async def root():
    """
    Root endpoint for health check.
    """
    return {"message": "PageVault API", "status": "running"}


@app.get("/health")
async def health_check():
    """
    Health check endpoint for Docker healthcheck.
    Returns 200 if service is alive.
    """
    return {"status": "healthy", "service": "pagevault"}


def main():
    """
    Run the PageVault server with uvicorn.
    """
    logger.info(f"Starting PageVault server on {config.SERVER_HOST}:{config.SERVER_PORT}")
    uvicorn.run(app, host=config.SERVER_HOST, port=config.SERVER_PORT)


if __name__ == "__main__":
    main()
