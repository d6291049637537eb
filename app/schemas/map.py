from pydantic import BaseModel
from typing import Any, Dict, List, Literal, Optional, Tuple

MapMode = Literal["pins", "map", "grid"]

class Marker(BaseModel):
    property_id: str
    left: float
    top: float

class PropertyCard(BaseModel):
    id: str
    title: str
    price: str
    beds: float
    baths: float
    sqft: str
    city: str
    status: str
    image: Optional[str] = None

class MapViewResponse(BaseModel):
    mode: MapMode
    total: int
    markers: List[Marker] = []
    features: Optional[Dict[str, Any]] = None
    bounds: Optional[Tuple[Tuple[float, float], Tuple[float, float]]] = None
    cards: List[PropertyCard] = []
    selected: Optional[PropertyCard] = None
