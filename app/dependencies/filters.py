from fastapi import Query
from typing import List, Optional
from app.schemas.property import DEFAULT_PRICE_RANGE, FilterOptions
from app.services.pipeline import seed_filters

def listing_filters(
    min_price: float = DEFAULT_PRICE_RANGE[0],
    max_price: float = DEFAULT_PRICE_RANGE[1],
    beds: Optional[float] = None,
    baths: Optional[float] = None,
    home_type: Optional[List[str]] = Query(None),
    min_sqft: Optional[float] = None,
    amenities: Optional[List[str]] = Query(None),
    status: Optional[List[str]] = Query(None),
) -> FilterOptions:
    """Build the filter set from query parameters.

    ``?status=sale`` replaces the default statuses; a bare ``?status=`` clears them.
    """
    return seed_filters(
        status=status,
        price_range=(min_price, max_price),
        beds=beds,
        baths=baths,
        home_type=home_type or [],
        min_sqft=min_sqft,
        amenities=amenities or [],
    )
