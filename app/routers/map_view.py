from fastapi import APIRouter, Depends
from typing import Optional
from structlog import get_logger
from app.config import settings
from app.dependencies.filters import listing_filters
from app.schemas.map import MapMode, MapViewResponse
from app.schemas.property import FilterOptions
from app.services.map_view import build_view
from app.services.properties import fetch_properties

logger = get_logger()
router = APIRouter(prefix="/api/v1/map", tags=["map"])

@router.get("", response_model=MapViewResponse)
async def map_view(
    filters: FilterOptions = Depends(listing_filters),
    mode: Optional[MapMode] = None,
    selected: Optional[str] = None,
    step: int = 0,
):
    """Markers, map features or cards for the filtered listings.

    ``selected`` with ``step`` (-1 or 1) moves the detail overlay through the
    same filtered list, wrapping at the ends.
    """
    properties = await fetch_properties(filters=filters)
    view = build_view(properties, mode or settings.MAP_MODE, selected_id=selected, step=step)
    logger.info("Built map view", mode=view.mode, total=view.total)
    return view
