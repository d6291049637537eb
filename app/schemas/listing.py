from pydantic import BaseModel, Field
from typing import Dict, List, Literal, Optional
from app.schemas.property import Property

class Notification(BaseModel):
    title: str
    description: str = ""
    variant: Literal["default", "destructive"] = "default"

class ListingForm(BaseModel):
    """Raw listing form values as submitted; numbers arrive as strings."""
    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    beds: Optional[str] = None
    baths: Optional[str] = None
    sqft: Optional[str] = None
    year: Optional[str] = None
    lat: Optional[str] = None
    lng: Optional[str] = None
    type: str = "house"
    status: str = "sale"

class ListingValidationResponse(BaseModel):
    errors: Dict[str, str]
    notification: Notification

class ListingCreatedResponse(BaseModel):
    property: Property
    notification: Notification

class AmenityListResponse(BaseModel):
    amenities: List[str] = Field(default_factory=list)
