from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from filebrowser.config import Settings, get_settings
from filebrowser.errors import (
    ConflictError,
    InvalidRequestError,
    NotFoundError,
    PathUnsafeError,
)
from filebrowser.paths import PathResolver
from filebrowser.routers import files, search, views
from filebrowser.services import FileService

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------

async def not_found_handler(request: Request, exc: Exception):
    # Unsafe paths share this response so nothing about the layout leaks.
    return JSONResponse(status_code=404, content={"detail": "Not found"})


async def conflict_handler(request: Request, exc: ConflictError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


async def invalid_request_handler(request: Request, exc: InvalidRequestError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


async def io_failure_handler(request: Request, exc: OSError):
    logger.error("Filesystem error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": exc.strerror or str(exc)})


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application around a single data root."""
    settings = settings or get_settings()
    resolver = PathResolver(settings.data_path)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        resolver.root.mkdir(parents=True, exist_ok=True)
        logger.info("File browser started, data path: %s", resolver.root)
        yield

    app = FastAPI(title="File Browser API", lifespan=lifespan)
    app.state.settings = settings
    app.state.file_service = FileService(resolver)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(PathUnsafeError, not_found_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(ConflictError, conflict_handler)
    app.add_exception_handler(InvalidRequestError, invalid_request_handler)
    app.add_exception_handler(OSError, io_failure_handler)

    app.include_router(files.router, prefix="/api")
    app.include_router(views.router, prefix="/api")
    app.include_router(search.router, prefix="/api")
    app.include_router(views.page_router)

    @app.get("/api/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
