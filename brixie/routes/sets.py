"""
Set routes: browsing, search, details, favorites, collection and images.
"""

import logging
import mimetypes

from fastapi import APIRouter, Query, Response

from ..config import config
from ..exceptions import PersistenceError, require_resource, require_set
from ..repositories import SetRepositoryDep
from ..schemas import BackfillResponse, CollectionStatsResponse, SetResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sets", tags=["sets"])


# ─────────────────────────────────────────────────────────────
# Browsing and Search
# ─────────────────────────────────────────────────────────────

@router.get("")
async def list_sets(
    repo: SetRepositoryDep,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
) -> list[SetResponse]:
    """List a page of sets, served from cache when offline."""
    sets = await repo.fetch_sets(page, page_size)
    return [SetResponse.from_db(s) for s in sets]


@router.get("/search")
async def search_sets(
    q: str,
    repo: SetRepositoryDep,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
) -> list[SetResponse]:
    """Search sets by name or number."""
    sets = await repo.search_sets(q, page, page_size)
    return [SetResponse.from_db(s) for s in sets]


@router.get("/favorites")
async def list_favorites(repo: SetRepositoryDep) -> list[SetResponse]:
    sets = await repo.get_favorite_sets()
    return [SetResponse.from_db(s) for s in sets]


@router.get("/recent")
async def list_recently_viewed(
    repo: SetRepositoryDep,
    limit: int = Query(default=20, ge=1, le=100),
) -> list[SetResponse]:
    sets = await repo.get_recently_viewed(limit)
    return [SetResponse.from_db(s) for s in sets]


@router.post("/backfill-theme-names")
async def backfill_theme_names(repo: SetRepositoryDep) -> BackfillResponse:
    """Fill in missing theme names on cached sets."""
    updated = await repo.backfill_theme_names()
    return BackfillResponse(updated=updated)


# ─────────────────────────────────────────────────────────────
# Collection
# ─────────────────────────────────────────────────────────────

@router.get("/owned")
async def list_owned(repo: SetRepositoryDep) -> list[SetResponse]:
    sets = await repo.get_owned_sets()
    return [SetResponse.from_db(s) for s in sets]


@router.get("/wishlist")
async def list_wishlist(repo: SetRepositoryDep) -> list[SetResponse]:
    sets = await repo.get_wishlist_sets()
    return [SetResponse.from_db(s) for s in sets]


@router.get("/collection/stats")
async def collection_stats(repo: SetRepositoryDep) -> CollectionStatsResponse:
    """Counts over the owned sets and the wishlist."""
    return CollectionStatsResponse.from_db(await repo.get_collection_stats())


# ─────────────────────────────────────────────────────────────
# Single Set
# ─────────────────────────────────────────────────────────────

@router.get("/{set_num}")
async def get_set(set_num: str, repo: SetRepositoryDep) -> SetResponse:
    """Get set details and remember it as recently viewed."""
    lego_set = require_set(await repo.get_set_details(set_num))
    try:
        lego_set = await repo.mark_as_viewed(set_num) or lego_set
    except PersistenceError as e:
        logger.warning(f"Could not mark set {set_num} as viewed: {e}")
    return SetResponse.from_db(lego_set)


@router.get("/{set_num}/image")
async def get_set_image(set_num: str, repo: SetRepositoryDep) -> Response:
    lego_set = require_set(await repo.get_cached_set(set_num))
    data = require_resource(await repo.load_image(lego_set), "Image not available")

    media_type = "image/jpeg"
    if lego_set.image_url:
        media_type = mimetypes.guess_type(lego_set.image_url)[0] or media_type
    return Response(content=data, media_type=media_type)


@router.post("/{set_num}/favorite")
async def add_favorite(set_num: str, repo: SetRepositoryDep) -> SetResponse:
    return SetResponse.from_db(require_set(await repo.mark_as_favorite(set_num)))


@router.delete("/{set_num}/favorite")
async def remove_favorite(set_num: str, repo: SetRepositoryDep) -> SetResponse:
    return SetResponse.from_db(require_set(await repo.remove_from_favorites(set_num)))


@router.post("/{set_num}/owned")
async def add_owned(set_num: str, repo: SetRepositoryDep) -> SetResponse:
    """Mark a cached set as owned; it leaves the wishlist."""
    return SetResponse.from_db(require_set(await repo.mark_as_owned(set_num)))


@router.delete("/{set_num}/owned")
async def remove_owned(set_num: str, repo: SetRepositoryDep) -> SetResponse:
    return SetResponse.from_db(require_set(await repo.remove_from_owned(set_num)))


@router.post("/{set_num}/wishlist")
async def add_wishlist(set_num: str, repo: SetRepositoryDep) -> SetResponse:
    return SetResponse.from_db(require_set(await repo.add_to_wishlist(set_num)))


@router.delete("/{set_num}/wishlist")
async def remove_wishlist(set_num: str, repo: SetRepositoryDep) -> SetResponse:
    return SetResponse.from_db(require_set(await repo.remove_from_wishlist(set_num)))
