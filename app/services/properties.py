from httpx import AsyncClient
from structlog import get_logger
from typing import Any, Dict, List, Optional, Tuple
from app.config import settings
from app.schemas.property import FilterOptions, Property
from app.services.catalog import normalize_rows, sample_catalog
from app.services.pipeline import apply_pipeline

logger = get_logger()

_supabase_base = settings.SUPABASE_URL.rstrip("/")
_table_url = f"{_supabase_base}/rest/v1/{settings.PROPERTIES_TABLE}"

_ORDER_BY_SORT = {
    "price-asc": "price.asc",
    "price-desc": "price.desc",
    "newest": "year_built.desc",
    "oldest": "year_built.asc",
}

class ListingSubmissionError(Exception):
    """Raised when an image upload or the record insert fails."""

def supabase_headers(access_token: Optional[str] = None) -> Dict[str, str]:
    return {
        "apikey": settings.SUPABASE_KEY,
        "Authorization": f"Bearer {access_token or settings.SUPABASE_KEY}",
    }

def _num(value: float):
    return int(value) if float(value).is_integer() else value

def _quote(value: str) -> str:
    return '"' + str(value).replace('"', '\\"') + '"'

def build_query(
    filters: Optional[FilterOptions] = None,
    sort_by: Optional[str] = None,
    limit: Optional[int] = None,
    featured: Optional[bool] = None,
) -> List[Tuple[str, str]]:
    """Translate a filter set into PostgREST query parameters."""
    params = [("select", "*")]
    if filters is not None:
        low, high = filters.price_range
        params.append(("price", f"gte.{_num(low)}"))
        params.append(("price", f"lte.{_num(high)}"))
        if filters.beds is not None:
            params.append(("beds", f"gte.{_num(filters.beds)}"))
        if filters.baths is not None:
            params.append(("baths", f"gte.{_num(filters.baths)}"))
        if filters.home_type:
            params.append(("type", f"in.({','.join(filters.home_type)})"))
        if filters.min_sqft is not None:
            params.append(("sqft", f"gte.{_num(filters.min_sqft)}"))
        if filters.status:
            params.append(("status", f"in.({','.join(filters.status)})"))
        if filters.amenities:
            # array containment: every requested amenity must be present
            params.append(("amenities", "cs.{" + ",".join(_quote(a) for a in filters.amenities) + "}"))
    if featured is not None:
        params.append(("featured", f"eq.{str(featured).lower()}"))
    params.append(("order", _ORDER_BY_SORT.get(sort_by or "", "featured.desc")))
    if limit:
        params.append(("limit", str(limit)))
    return params

async def fetch_properties(
    filters: Optional[FilterOptions] = None,
    sort_by: Optional[str] = None,
    limit: Optional[int] = None,
    featured: Optional[bool] = None,
) -> List[Property]:
    if settings.CATALOG_SOURCE != "supabase":
        result = apply_pipeline(sample_catalog(), filters, sort_by)
        if featured is not None:
            result = [p for p in result if p.featured == featured]
        return result[:limit] if limit else result

    try:
        async with AsyncClient(timeout=settings.HTTP_TIMEOUT) as client:
            response = await client.get(
                _table_url,
                headers=supabase_headers(),
                params=build_query(filters, sort_by, limit, featured),
            )
        if not 200 <= response.status_code < 300:
            logger.warning("Error fetching properties", status_code=response.status_code, body=response.text)
            return []
        properties = normalize_rows(response.json())
        logger.info("Fetched properties", total=len(properties))
        return properties
    except Exception as e:
        logger.error("Error in fetch_properties", error=str(e))
        return []

async def fetch_property_by_id(property_id: str) -> Optional[Property]:
    if settings.CATALOG_SOURCE != "supabase":
        return next((p for p in sample_catalog() if p.id == property_id), None)

    try:
        async with AsyncClient(timeout=settings.HTTP_TIMEOUT) as client:
            response = await client.get(
                _table_url,
                headers=supabase_headers(),
                params={"select": "*", "id": f"eq.{property_id}"},
            )
        if not 200 <= response.status_code < 300:
            logger.warning("Error fetching property", property_id=property_id, status_code=response.status_code)
            return None
        rows = normalize_rows(response.json())
        return rows[0] if rows else None
    except Exception as e:
        logger.error("Error in fetch_property_by_id", property_id=property_id, error=str(e))
        return None

async def fetch_similar_properties(prop: Property, limit: int = 3) -> List[Property]:
    """Other listings of the same type or in the same city."""
    if settings.CATALOG_SOURCE != "supabase":
        similar = [
            p for p in sample_catalog()
            if p.id != prop.id and (p.type == prop.type or p.address.city == prop.address.city)
        ]
        return similar[:limit]

    params = {
        "select": "*",
        "id": f"neq.{prop.id}",
        "or": f"(type.eq.{prop.type},address->>city.eq.{_quote(prop.address.city)})",
        "limit": str(limit),
    }
    try:
        async with AsyncClient(timeout=settings.HTTP_TIMEOUT) as client:
            response = await client.get(_table_url, headers=supabase_headers(), params=params)
        if not 200 <= response.status_code < 300:
            logger.warning("Error fetching similar properties", property_id=prop.id, status_code=response.status_code)
            return []
        return normalize_rows(response.json())
    except Exception as e:
        logger.error("Error in fetch_similar_properties", property_id=prop.id, error=str(e))
        return []

async def create_property(record: Dict[str, Any], access_token: str) -> Property:
    """Insert one listing row and return it as stored."""
    headers = {**supabase_headers(access_token), "Prefer": "return=representation"}
    try:
        async with AsyncClient(timeout=settings.HTTP_TIMEOUT) as client:
            response = await client.post(_table_url, headers=headers, json=record)
    except Exception as e:
        logger.error("Property insert request failed", error=str(e))
        raise ListingSubmissionError(f"Error creating property: {e}") from e
    if not 200 <= response.status_code < 300:
        try:
            err = response.json().get("message") or response.text
        except Exception:
            err = response.text or "Upstream error"
        logger.warning("Property insert rejected", status_code=response.status_code, error=err)
        raise ListingSubmissionError(f"Error creating property: {err}")
    rows = normalize_rows(response.json())
    if not rows:
        raise ListingSubmissionError("Error creating property: empty response")
    logger.info("Created property", property_id=rows[0].id)
    return rows[0]
