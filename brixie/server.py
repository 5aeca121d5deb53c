"""
Brixie Catalog API Server

FastAPI application providing endpoints for:
- Set browsing, search, details and favorites
- Theme browsing and search
- Sync status per feed
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from . import __version__
from .config import config
from .database import Database
from .exceptions import BrixieError
from .image_cache import ImageService, create_image_service
from .remote import CatalogRemote, RebrickableCatalog
from .repositories import build_repositories
from .routes import misc_router, sets_router, themes_router

logger = logging.getLogger(__name__)


def _wire(app: FastAPI, db: Database, remote: CatalogRemote, image_service: ImageService | None):
    """Attach the store, remote and repositories to the app."""
    set_repository, theme_repository = build_repositories(remote, db, image_service)
    app.state.db = db
    app.state.remote = remote
    app.state.image_service = image_service
    app.state.set_repository = set_repository
    app.state.theme_repository = theme_repository


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build collaborators from config unless they were injected."""
    if getattr(app.state, "db", None) is None:
        db = Database(config.DB_PATH)
        remote = RebrickableCatalog(
            api_key=config.REBRICKABLE_API_KEY,
            base_url=config.REBRICKABLE_BASE_URL,
            timeout=config.REQUEST_TIMEOUT,
        )
        image_service = create_image_service(
            config.CACHE_DIR,
            memory_items=config.IMAGE_MEMORY_ITEMS,
            max_bytes=config.IMAGE_CACHE_MAX_BYTES,
            timeout=config.REQUEST_TIMEOUT,
        )
        _wire(app, db, remote, image_service)
        logger.info(f"Catalog cache at {config.DB_PATH}")

        if not config.has_api_key():
            logger.warning(
                "No REBRICKABLE_API_KEY configured. Remote fetches will fail "
                "and only cached data will be served."
            )

    yield


async def brixie_error_handler(request: Request, exc: BrixieError) -> JSONResponse:
    logger.warning(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": str(exc),
            "recovery_suggestion": exc.recovery_suggestion,
        },
    )


def create_app(
    db: Database | None = None,
    remote: CatalogRemote | None = None,
    image_service: ImageService | None = None,
) -> FastAPI:
    """
    Create the API application.

    Args:
        db: Local store; built from config at startup when omitted
        remote: Remote catalog; required when db is given
        image_service: Optional image downloader for set images
    """
    logging.basicConfig(level=config.LOG_LEVEL.upper())

    app = FastAPI(
        title="Brixie Catalog API",
        version=__version__,
        lifespan=lifespan
    )

    if db is not None:
        if remote is None:
            raise ValueError("remote is required when db is injected")
        _wire(app, db, remote, image_service)

    app.add_exception_handler(BrixieError, brixie_error_handler)

    # Include routers
    app.include_router(misc_router)
    app.include_router(sets_router)
    app.include_router(themes_router)

    return app


app = create_app()


def main():
    """Run the API server with uvicorn."""
    import uvicorn

    uvicorn.run("brixie.server:app", host="127.0.0.1", port=config.PORT)


if __name__ == "__main__":
    main()
