from typing import List, Optional, Sequence, Tuple
from app.schemas.map import MapViewResponse, Marker, PropertyCard
from app.schemas.property import Property
import random

def format_price(prop: Property) -> str:
    price = f"${prop.price:,.0f}"
    return f"{price}/mo" if prop.status == "rent" else price

def to_card(prop: Property) -> PropertyCard:
    return PropertyCard(
        id=prop.id,
        title=prop.title,
        price=format_price(prop),
        beds=prop.beds,
        baths=prop.baths,
        sqft=f"{prop.sqft:,.0f}",
        city=prop.address.city,
        status=prop.status,
        image=prop.images[0] if prop.images else None,
    )

def placeholder_markers(properties: Sequence[Property], rng: Optional[random.Random] = None) -> List[Marker]:
    """Decorative pins at random screen positions; no geocoding is involved."""
    rng = rng or random.Random()
    return [
        Marker(property_id=p.id, left=30 + rng.random() * 60, top=30 + rng.random() * 40)
        for p in properties
    ]

def to_featurecollection(properties: Sequence[Property]) -> dict:
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [p.location.lng, p.location.lat]},
                "properties": {
                    "id": p.id,
                    "title": p.title,
                    "price": format_price(p),
                    "status": p.status,
                },
            }
            for p in properties
        ],
    }

def fit_bounds(properties: Sequence[Property]) -> Optional[Tuple[Tuple[float, float], Tuple[float, float]]]:
    """South-west and north-east corners ``((lng, lat), (lng, lat))`` enclosing every listing."""
    if not properties:
        return None
    lngs = [p.location.lng for p in properties]
    lats = [p.location.lat for p in properties]
    return (min(lngs), min(lats)), (max(lngs), max(lats))

def cycle_selection(properties: Sequence[Property], current_id: str, step: int) -> Optional[Property]:
    """Previous (step < 0) or next listing in the filtered list, wrapping at both ends."""
    if not properties:
        return None
    index = next((i for i, p in enumerate(properties) if p.id == current_id), None)
    if index is None:
        return properties[0]
    return properties[(index + step) % len(properties)]

def cycle_image(index: int, count: int, step: int) -> int:
    if count <= 0:
        return 0
    return (index + step) % count

def build_view(
    properties: Sequence[Property],
    mode: str,
    selected_id: Optional[str] = None,
    step: int = 0,
    rng: Optional[random.Random] = None,
) -> MapViewResponse:
    view = MapViewResponse(mode=mode, total=len(properties))
    if mode == "pins":
        view.markers = placeholder_markers(properties, rng)
    elif mode == "map":
        view.features = to_featurecollection(properties)
        view.bounds = fit_bounds(properties)
    else:
        view.cards = [to_card(p) for p in properties]
    if selected_id is not None:
        selected = cycle_selection(properties, selected_id, step)
        view.selected = to_card(selected) if selected else None
    return view
