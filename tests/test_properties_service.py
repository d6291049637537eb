import httpx
import pytest
from app.schemas.property import FilterOptions
from app.services.catalog import SAMPLE_ROWS
from app.services.properties import (
    ListingSubmissionError,
    build_query,
    create_property,
    fetch_properties,
    fetch_property_by_id,
    fetch_similar_properties,
)

MODULE = "app.services.properties"

def test_build_query_translates_every_filter():
    filters = FilterOptions(
        priceRange=(100, 2000),
        beds=2,
        baths=1.5,
        homeType=["house", "condo"],
        minSqft=900,
        amenities=["Pool", "Smart Home"],
        status=["sale"],
    )
    params = build_query(filters, sort_by="price-desc", limit=10, featured=True)
    assert ("price", "gte.100") in params
    assert ("price", "lte.2000") in params
    assert ("beds", "gte.2") in params
    assert ("baths", "gte.1.5") in params
    assert ("type", "in.(house,condo)") in params
    assert ("sqft", "gte.900") in params
    assert ("status", "in.(sale)") in params
    assert ("amenities", 'cs.{"Pool","Smart Home"}') in params
    assert ("featured", "eq.true") in params
    assert ("order", "price.desc") in params
    assert ("limit", "10") in params

def test_build_query_defaults_to_featured_order():
    params = build_query()
    assert params == [("select", "*"), ("order", "featured.desc")]
    assert ("order", "year_built.desc") in build_query(sort_by="newest")
    assert ("order", "year_built.asc") in build_query(sort_by="oldest")

@pytest.mark.asyncio
async def test_fetch_properties_from_supabase(supabase_catalog, mock_upstream):
    seen = {}

    def handler(request: httpx.Request):
        seen["url"] = request.url
        return httpx.Response(200, json=SAMPLE_ROWS[:2])

    mock_upstream(MODULE, handler)
    result = await fetch_properties(FilterOptions(status=["sale"]), sort_by="price-asc")
    assert [p.id for p in result] == ["1", "2"]
    assert seen["url"].path.endswith("/rest/v1/properties")
    assert seen["url"].params["order"] == "price.asc"
    assert seen["url"].params["status"] == "in.(sale)"

@pytest.mark.asyncio
async def test_fetch_properties_degrades_to_empty_list(supabase_catalog, mock_upstream):
    mock_upstream(MODULE, lambda request: httpx.Response(500, text="boom"))
    assert await fetch_properties() == []

    def unreachable(request):
        raise httpx.ConnectError("connection refused", request=request)

    mock_upstream(MODULE, unreachable)
    assert await fetch_properties() == []
    assert await fetch_property_by_id("1") is None

@pytest.mark.asyncio
async def test_fetch_property_by_id_from_supabase(supabase_catalog, mock_upstream):
    def handler(request):
        if request.url.params["id"] == "eq.3":
            return httpx.Response(200, json=[SAMPLE_ROWS[2]])
        return httpx.Response(200, json=[])

    mock_upstream(MODULE, handler)
    assert (await fetch_property_by_id("3")).title == "Coastal Contemporary Home"
    assert await fetch_property_by_id("404") is None

@pytest.mark.asyncio
async def test_fetch_similar_queries_type_or_city(supabase_catalog, mock_upstream, catalog):
    seen = {}

    def handler(request):
        seen["params"] = request.url.params
        return httpx.Response(200, json=[SAMPLE_ROWS[5]])

    mock_upstream(MODULE, handler)
    result = await fetch_similar_properties(catalog[0])
    assert [p.id for p in result] == ["6"]
    assert seen["params"]["id"] == "neq.1"
    assert seen["params"]["or"] == '(type.eq.house,address->>city.eq."Palm Springs")'
    assert seen["params"]["limit"] == "3"

@pytest.mark.asyncio
async def test_sample_catalog_reads(catalog):
    result = await fetch_properties(FilterOptions(), sort_by="price-asc", limit=2)
    assert [p.id for p in result] == ["4", "1"]
    assert [p.id for p in await fetch_properties(featured=False)] == ["4", "6"]
    assert (await fetch_property_by_id("2")).address.city == "Los Angeles"
    assert await fetch_property_by_id("nope") is None
    similar = await fetch_similar_properties(catalog[0])
    assert [p.id for p in similar] == ["3", "5", "6"]

@pytest.mark.asyncio
async def test_create_property_returns_stored_row(mock_upstream):
    seen = {}

    def handler(request):
        seen["prefer"] = request.headers["Prefer"]
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(201, json=[{**SAMPLE_ROWS[0], "id": "new-id"}])

    mock_upstream(MODULE, handler)
    prop = await create_property({"title": "x"}, "user-token")
    assert prop.id == "new-id"
    assert seen["prefer"] == "return=representation"
    assert seen["auth"] == "Bearer user-token"

@pytest.mark.asyncio
async def test_create_property_failure_raises(mock_upstream):
    mock_upstream(MODULE, lambda request: httpx.Response(400, json={"message": "violates check constraint"}))
    with pytest.raises(ListingSubmissionError, match="violates check constraint"):
        await create_property({"title": "x"}, "user-token")
