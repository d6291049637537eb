from typing import Any, Dict, List
from pydantic import ValidationError
from structlog import get_logger
from app.schemas.property import Property
import json

logger = get_logger()

_IMG = "https://images.unsplash.com/photo-{}?q=80&w={}&auto=format&fit=crop"

SAMPLE_ROWS: List[Dict[str, Any]] = [
    {
        "id": "1",
        "title": "Modern Minimalist Villa",
        "description": "A stunning modern villa with clean lines and minimalist design. Floor-to-ceiling windows flood the space with natural light, while the open concept living area seamlessly connects to a private garden and infinity pool. High-end finishes include custom Italian cabinetry, marble countertops, and smart home technology throughout.",
        "price": 1250000,
        "address": {"street": "123 Tranquility Lane", "city": "Palm Springs", "state": "CA", "zip": "92262"},
        "beds": 4,
        "baths": 3.5,
        "sqft": 3200,
        "type": "house",
        "year_built": 2021,
        "images": [
            _IMG.format("1600596542815-ffad4c1539a9", 2075),
            _IMG.format("1600585154340-be6161a56a0c", 2070),
            _IMG.format("1600607687939-ce8a6c25118c", 2053),
        ],
        "featured": True,
        "amenities": ["Pool", "Smart Home", "Garden", "Solar Panels", "EV Charging"],
        "location": {"lat": 33.8303, "lng": -116.5453},
        "status": "sale",
    },
    {
        "id": "2",
        "title": "Luxury Downtown Penthouse",
        "description": "Exclusive penthouse offering breathtaking city views with floor-to-ceiling windows. This luxury residence features a gourmet kitchen with top-of-the-line appliances, a spacious primary suite with walk-in closet, and a private rooftop terrace perfect for entertaining.",
        "price": 3500000,
        "address": {"street": "800 Downtown Plaza", "city": "Los Angeles", "state": "CA", "zip": "90015"},
        "beds": 3,
        "baths": 3,
        "sqft": 2800,
        "type": "apartment",
        "year_built": 2019,
        "images": [
            _IMG.format("1522708323590-d24dbb6b0267", 2070),
            _IMG.format("1631679706909-1844bbd07221", 1992),
            _IMG.format("1560185127-6ed189bf02f4", 2070),
        ],
        "featured": True,
        "amenities": ["Rooftop Terrace", "Concierge", "Gym", "Wine Cellar", "Sauna"],
        "location": {"lat": 34.0522, "lng": -118.2437},
        "status": "sale",
    },
    {
        "id": "3",
        "title": "Coastal Contemporary Home",
        "description": "Magnificent ocean-view property designed for indoor-outdoor living. With retractable glass walls, this home blurs the line between inside and out, allowing you to enjoy the coastal breeze throughout. A chef's kitchen, media room, and luxurious primary suite make this the perfect retreat.",
        "price": 4200000,
        "address": {"street": "55 Oceanview Drive", "city": "Malibu", "state": "CA", "zip": "90265"},
        "beds": 5,
        "baths": 4.5,
        "sqft": 4500,
        "type": "house",
        "year_built": 2020,
        "images": [
            _IMG.format("1628744448840-55bdb2497bd4", 2070),
            _IMG.format("1628744424962-386697428c75", 2070),
            _IMG.format("1628744448838-6573d697cef7", 2070),
        ],
        "featured": True,
        "amenities": ["Ocean View", "Infinity Pool", "Media Room", "Wine Cellar", "Outdoor Kitchen"],
        "location": {"lat": 34.0259, "lng": -118.7798},
        "status": "sale",
    },
    {
        "id": "4",
        "title": "Urban Loft Apartment",
        "description": "Stylish industrial loft in a converted historic building featuring exposed brick walls, high ceilings, and original hardwood floors. This open concept space offers modern amenities while preserving its authentic character.",
        "price": 5500,
        "address": {"street": "212 Artist Alley", "city": "San Francisco", "state": "CA", "zip": "94110"},
        "beds": 2,
        "baths": 2,
        "sqft": 1800,
        "type": "apartment",
        "year_built": 1935,
        "images": [
            _IMG.format("1560448204-e02f11c3d0e2", 2070),
            _IMG.format("1527359443443-84a48aec73d2", 2070),
            _IMG.format("1586023492125-27b2c045efd7", 1958),
        ],
        "featured": False,
        "amenities": ["Roof Deck", "Bike Storage", "Pet Friendly", "Security System"],
        "location": {"lat": 37.7749, "lng": -122.4194},
        "status": "rent",
    },
    {
        "id": "5",
        "title": "Hillside Architectural Masterpiece",
        "description": "Award-winning architectural home with panoramic city views. This showstopping residence features dramatic living spaces, a cantilevered infinity pool, and state-of-the-art smart home technology throughout.",
        "price": 6800000,
        "address": {"street": "1555 Skyline Drive", "city": "Beverly Hills", "state": "CA", "zip": "90210"},
        "beds": 6,
        "baths": 7,
        "sqft": 6200,
        "type": "house",
        "year_built": 2018,
        "images": [
            _IMG.format("1613490493576-7fde63acd811", 2071),
            _IMG.format("1600607687920-4e2a09cf159d", 2070),
            _IMG.format("1602343168117-bb8ffe3e2e9f", 2025),
        ],
        "featured": True,
        "amenities": ["City Views", "Infinity Pool", "Home Theater", "Wine Cellar", "Smart Home"],
        "location": {"lat": 34.0901, "lng": -118.4065},
        "status": "sale",
    },
    {
        "id": "6",
        "title": "Mid-Century Modern Classic",
        "description": "Beautifully restored mid-century gem with original architectural details and modern updates. This home offers an open floor plan, walls of glass, terrazzo floors, and a stunning kidney-shaped pool.",
        "price": 1950000,
        "address": {"street": "742 Retro Road", "city": "Palm Springs", "state": "CA", "zip": "92262"},
        "beds": 3,
        "baths": 2,
        "sqft": 2100,
        "type": "house",
        "year_built": 1962,
        "images": [
            _IMG.format("1605276374104-dee2a0ed3cd6", 2070),
            _IMG.format("1600210492493-0946911123ea", 2074),
            _IMG.format("1609766856852-1e764e883ep7f", 2070),
        ],
        "featured": False,
        "amenities": ["Pool", "Mountain Views", "Fireplace", "Original Features"],
        "location": {"lat": 33.8302, "lng": -116.5452},
        "status": "pending",
    },
]

AMENITIES = [
    "Pool",
    "Smart Home",
    "Garden",
    "Solar Panels",
    "EV Charging",
    "Rooftop Terrace",
    "Concierge",
    "Gym",
    "Wine Cellar",
    "Sauna",
    "Ocean View",
    "Infinity Pool",
    "Media Room",
    "Outdoor Kitchen",
    "Roof Deck",
    "Bike Storage",
    "Pet Friendly",
    "Security System",
    "City Views",
    "Home Theater",
    "Mountain Views",
    "Fireplace",
    "Original Features",
]

_EMPTY_ADDRESS = {"street": "", "city": "", "state": "", "zip": ""}
_ZERO_LOCATION = {"lat": 0, "lng": 0}

def _json_field(value: Any, fallback: Dict[str, Any]) -> Dict[str, Any]:
    """Decode a JSON column that may arrive as an object or as a string."""
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return dict(fallback)
    if not isinstance(value, dict):
        return dict(fallback)
    return {**fallback, **value}

def normalize_property(row: Dict[str, Any]) -> Property:
    """Map a hosted ``properties`` row onto the Property model.
    - address/location JSON is parsed; malformed values fall back to empty
      address fields or zero coordinates
    - ``year_built`` becomes ``yearBuilt``; missing ``featured`` is false
    - price is coerced to a number
    """
    location = _json_field(row.get("location"), _ZERO_LOCATION)
    try:
        location = {"lat": float(location["lat"]), "lng": float(location["lng"])}
    except (TypeError, ValueError):
        location = dict(_ZERO_LOCATION)
    return Property(
        id=str(row["id"]),
        title=row.get("title") or "",
        description=row.get("description") or "",
        price=float(row.get("price") or 0),
        address=_json_field(row.get("address"), _EMPTY_ADDRESS),
        beds=row.get("beds") or 0,
        baths=row.get("baths") or 0,
        sqft=row.get("sqft") or 0,
        type=row.get("type") or "house",
        yearBuilt=row.get("year_built") or row.get("yearBuilt") or 0,
        images=row.get("images") or [],
        featured=bool(row.get("featured") or False),
        amenities=row.get("amenities") or [],
        location=location,
        status=row.get("status") or "sale",
    )

def normalize_rows(rows: Any) -> List[Property]:
    if isinstance(rows, dict):
        rows = [rows]
    if not isinstance(rows, list):
        return []
    out = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        try:
            out.append(normalize_property(row))
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            logger.warning("Skipping malformed property row", row_id=row.get("id"), error=str(e))
    return out

def sample_catalog() -> List[Property]:
    return [normalize_property(row) for row in SAMPLE_ROWS]
