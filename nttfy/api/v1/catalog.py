from fastapi import APIRouter, Depends, Query
from nttfy.context import AppContext
from nttfy.core.logging import get_logger
from nttfy.dependencies import get_context, get_current_user
from nttfy.services.catalog_service import CatalogServiceError
from nttfy.schemas.catalog import TrackListResponse

logger = get_logger("api.catalog")
router = APIRouter(dependencies=[Depends(get_current_user)])

HOME_ERROR = "Could not load songs. Try again later."
SEARCH_ERROR = "Search failed. Try again later."


@router.get("/home", response_model=TrackListResponse)
async def get_home_feed(context: AppContext = Depends(get_context)):
    """Shuffled discovery tracks for the home screen"""
    try:
        tracks = await context.catalog.home_feed()
    except CatalogServiceError as e:
        logger.warning(f"Home feed unavailable: {e}")
        return {"tracks": [], "error": HOME_ERROR}
    return {"tracks": tracks}


@router.get("/search", response_model=TrackListResponse)
async def search_tracks(
    q: str = Query(..., description="Song or artist"),
    limit: int | None = Query(None, ge=1, le=100),
    context: AppContext = Depends(get_context),
):
    """Search playable tracks (only those with a preview URL)"""
    logger.debug(f"Searching catalog for '{q}'")
    try:
        tracks = await context.catalog.search(q, limit or context.settings.search_limit)
    except CatalogServiceError as e:
        logger.warning(f"Search unavailable: {e}")
        return {"tracks": [], "error": SEARCH_ERROR}
    return {"tracks": tracks}
