"""
FastAPI application factory
"""
import logging
import traceback
from pathlib import Path
from urllib.parse import urlparse

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from clientdesk.config import get_settings
from clientdesk.infrastructure.db.session import check_db_connection
from clientdesk.infrastructure.store.base import StoreError
from clientdesk.api.v1 import clients, invoices, dashboard

logger = logging.getLogger(__name__)


class ErrorLoggingMiddleware(BaseHTTPMiddleware):
    """Catches anything the routes let through and logs the traceback"""

    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            tb_str = traceback.format_exc()
            logger.error("\n%s\nERROR on %s %s\n%s%s", "=" * 60, request.method, request.url.path, tb_str, "=" * 60)
            return Response(content=f"Internal Server Error: {exc}", status_code=500)


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    """A failed read: the view shows its error state"""
    logger.warning("Store read failed on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=502, content={"detail": exc.message})


def create_app() -> FastAPI:
    """
    Application factory - builds and configures the FastAPI app

    Returns:
        Configured FastAPI app
    """
    settings = get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    app = FastAPI(
        title="ClientDesk",
        debug=settings.DEBUG,
    )

    app.add_middleware(ErrorLoggingMiddleware)
    app.add_exception_handler(StoreError, store_error_handler)

    # Uploaded files, served where put_blob says they are
    storage_dir = Path(settings.BLOB_STORAGE_DIR)
    storage_dir.mkdir(parents=True, exist_ok=True)
    storage_path = urlparse(settings.PUBLIC_BLOB_BASE_URL).path.rstrip("/") or "/storage"
    app.mount(storage_path, StaticFiles(directory=storage_dir), name="storage")

    app.include_router(dashboard.router)
    app.include_router(clients.router)
    app.include_router(invoices.router)

    # Health checks
    @app.get("/health", response_class=PlainTextResponse, tags=["system"])
    def health():
        """Health check endpoint"""
        return "ok"

    @app.get("/ready", response_class=PlainTextResponse, tags=["system"])
    def ready():
        """Readiness check endpoint (database reachable)"""
        check_db_connection()
        return "ok"

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "clientdesk.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
