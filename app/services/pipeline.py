from typing import Iterable, List, Optional, Union
from app.schemas.property import FilterOptions, Property

SORT_KEYS = ("featured", "price-asc", "price-desc", "newest", "oldest")

def matches(prop: Property, filters: FilterOptions) -> bool:
    """True when the listing satisfies every active predicate in ``filters``."""
    low, high = filters.price_range
    if not (low <= prop.price <= high):
        return False
    if filters.beds is not None and prop.beds < filters.beds:
        return False
    if filters.baths is not None and prop.baths < filters.baths:
        return False
    if filters.home_type and prop.type not in filters.home_type:
        return False
    if filters.min_sqft is not None and prop.sqft < filters.min_sqft:
        return False
    if filters.amenities and not all(a in prop.amenities for a in filters.amenities):
        return False
    if filters.status and prop.status not in filters.status:
        return False
    return True

def filter_properties(properties: Iterable[Property], filters: FilterOptions) -> List[Property]:
    return [p for p in properties if matches(p, filters)]

def sort_properties(properties: Iterable[Property], sort_by: Optional[str] = None) -> List[Property]:
    # sorted() is stable: equal keys keep catalog order
    items = list(properties)
    if sort_by == "price-asc":
        return sorted(items, key=lambda p: p.price)
    if sort_by == "price-desc":
        return sorted(items, key=lambda p: p.price, reverse=True)
    if sort_by == "newest":
        return sorted(items, key=lambda p: p.year_built, reverse=True)
    if sort_by == "oldest":
        return sorted(items, key=lambda p: p.year_built)
    return sorted(items, key=lambda p: not p.featured)

def apply_pipeline(
    properties: Iterable[Property],
    filters: Optional[FilterOptions] = None,
    sort_by: Optional[str] = None,
) -> List[Property]:
    """Filter the catalog then order it by one comparator. No pagination."""
    result = filter_properties(properties, filters) if filters is not None else list(properties)
    return sort_properties(result, sort_by)

def featured_properties(properties: Iterable[Property]) -> List[Property]:
    return [p for p in properties if p.featured]

def seed_filters(status: Union[str, List[str], None] = None, **overrides) -> FilterOptions:
    """Page default filters, with the ``status`` route parameter taking over the status filter.

    Blank entries are dropped, so an explicit empty value clears the status restriction.
    """
    filters = FilterOptions(**overrides)
    if status is not None:
        if isinstance(status, str):
            status = [status]
        filters = filters.model_copy(update={"status": [s for s in status if s.strip()]})
    return filters
