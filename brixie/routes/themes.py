"""
Theme routes: browsing, search and the sets of a theme.
"""

from fastapi import APIRouter, Query

from ..config import config
from ..exceptions import require_theme
from ..repositories import SetRepositoryDep, ThemeRepositoryDep
from ..schemas import SetResponse, ThemeResponse

router = APIRouter(prefix="/themes", tags=["themes"])


@router.get("")
async def list_themes(
    repo: ThemeRepositoryDep,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
) -> list[ThemeResponse]:
    """List a page of themes, served from cache when offline."""
    themes = await repo.fetch_themes(page, page_size)
    return [ThemeResponse.from_db(t) for t in themes]


@router.get("/search")
async def search_themes(
    q: str,
    repo: ThemeRepositoryDep,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
) -> list[ThemeResponse]:
    themes = await repo.search_themes(q, page, page_size)
    return [ThemeResponse.from_db(t) for t in themes]


@router.get("/{theme_id}")
async def get_theme(theme_id: int, repo: ThemeRepositoryDep) -> ThemeResponse:
    theme = require_theme(await repo.get_theme_details(theme_id))
    return ThemeResponse.from_db(theme)


@router.get("/{theme_id}/children")
async def list_child_themes(theme_id: int, repo: ThemeRepositoryDep) -> list[ThemeResponse]:
    """Cached sub-themes of a theme."""
    themes = await repo.get_child_themes(theme_id)
    return [ThemeResponse.from_db(t) for t in themes]


@router.get("/{theme_id}/sets")
async def list_theme_sets(
    theme_id: int,
    repo: SetRepositoryDep,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
) -> list[SetResponse]:
    sets = await repo.get_sets_for_theme(theme_id, page, page_size)
    return [SetResponse.from_db(s) for s in sets]
