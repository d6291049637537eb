from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional, Tuple

PropertyType = Literal["house", "apartment", "condo", "townhouse"]
PropertyStatus = Literal["sale", "rent", "sold", "pending"]

DEFAULT_PRICE_RANGE: Tuple[float, float] = (0, 10_000_000)
DEFAULT_STATUS = ["sale", "rent"]

class Address(BaseModel):
    street: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""

class Location(BaseModel):
    lat: float = 0
    lng: float = 0

class Property(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    title: str
    description: str = ""
    price: float
    address: Address = Field(default_factory=Address)
    beds: float
    baths: float
    sqft: float
    type: PropertyType
    year_built: int = Field(0, alias="yearBuilt")
    images: List[str] = Field(default_factory=list)
    featured: bool = False
    amenities: List[str] = Field(default_factory=list)
    location: Location = Field(default_factory=Location)
    status: PropertyStatus

class FilterOptions(BaseModel):
    """Predicate set narrowing the catalog.

    Empty ``home_type``, ``amenities`` and ``status`` lists mean no restriction.
    ``amenities`` is AND-matched, ``home_type`` and ``status`` are OR-matched.
    """
    model_config = ConfigDict(populate_by_name=True)

    price_range: Tuple[float, float] = Field(DEFAULT_PRICE_RANGE, alias="priceRange")
    beds: Optional[float] = None
    baths: Optional[float] = None
    home_type: List[str] = Field(default_factory=list, alias="homeType")
    min_sqft: Optional[float] = Field(None, alias="minSqft")
    amenities: List[str] = Field(default_factory=list)
    status: List[str] = Field(default_factory=lambda: list(DEFAULT_STATUS))

class PropertyListResponse(BaseModel):
    total: int
    items: List[Property]
