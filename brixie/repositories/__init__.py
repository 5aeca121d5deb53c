"""
Repository layer: local-first access to sets and themes.

Repositories receive their collaborators via constructor injection;
build_repositories wires one consistent pair. Routes get the instances
held on app.state through the dependency functions below.

Usage in routes:
    from ..repositories import SetRepositoryDep

    @router.get("/sets/favorites")
    async def favorites(repo: SetRepositoryDep):
        return await repo.get_favorite_sets()
"""

from typing import TYPE_CHECKING, Annotated

from fastapi import Depends, HTTPException, Request

from ..database import Database
from ..remote import CatalogRemote
from .set_repository import SetRepository, filter_sets
from .sync import record_sync
from .theme_repository import ThemeRepository

if TYPE_CHECKING:
    from ..image_cache import ImageService

__all__ = [
    # Repositories
    "SetRepository",
    "ThemeRepository",
    "build_repositories",
    "filter_sets",
    "record_sync",
    # Dependency factories
    "get_database",
    "get_set_repository",
    "get_theme_repository",
    # Type aliases for dependency injection
    "DatabaseDep",
    "SetRepositoryDep",
    "ThemeRepositoryDep",
]


def build_repositories(
    remote: CatalogRemote,
    db: Database,
    image_service: "ImageService | None" = None,
) -> tuple[SetRepository, ThemeRepository]:
    """Create a set repository and the theme repository it joins against."""
    themes = ThemeRepository(remote=remote, db=db)
    sets = SetRepository(
        remote=remote,
        db=db,
        theme_repository=themes,
        image_service=image_service,
    )
    return sets, themes


def get_database(request: Request) -> Database:
    """Dependency to get the app's Database."""
    db = getattr(request.app.state, "db", None)
    if db is None:
        raise HTTPException(status_code=500, detail="Database not initialized")
    return db


def get_set_repository(request: Request) -> SetRepository:
    """Dependency to get the app's SetRepository."""
    repo = getattr(request.app.state, "set_repository", None)
    if repo is None:
        raise HTTPException(status_code=500, detail="Set repository not initialized")
    return repo


def get_theme_repository(request: Request) -> ThemeRepository:
    """Dependency to get the app's ThemeRepository."""
    repo = getattr(request.app.state, "theme_repository", None)
    if repo is None:
        raise HTTPException(status_code=500, detail="Theme repository not initialized")
    return repo


DatabaseDep = Annotated[Database, Depends(get_database)]
SetRepositoryDep = Annotated[SetRepository, Depends(get_set_repository)]
ThemeRepositoryDep = Annotated[ThemeRepository, Depends(get_theme_repository)]
