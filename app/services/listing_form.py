from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy import insert
from structlog import get_logger
from typing import Dict, Iterable, List, Optional, Set, get_args
from app.config import settings
from app.models.listing_log import ListingLog
from app.schemas.auth import User
from app.schemas.listing import ListingCreatedResponse, ListingForm, Notification
from app.schemas.property import PropertyStatus, PropertyType
from app.services.properties import create_property
from app.services.storage import ImageFile, upload_image
import asyncio
import math
import uuid

logger = get_logger()

DEFAULT_AMENITIES = ["Air Conditioning"]
PROPERTY_TYPES = get_args(PropertyType)
LISTING_STATUSES = get_args(PropertyStatus)

_REQUIRED_TEXT = (
    ("title", "Title is required"),
    ("description", "Description is required"),
)
_REQUIRED_ADDRESS = (
    ("street", "Street address is required"),
    ("city", "City is required"),
    ("state", "State is required"),
    ("zip", "ZIP code is required"),
)
_POSITIVE_NUMBERS = (
    ("beds", "Number of beds is required"),
    ("baths", "Number of baths is required"),
    ("sqft", "Square footage is required"),
)

class ListingValidationError(Exception):
    def __init__(self, errors: Dict[str, str]):
        super().__init__("Please fix the errors in the form.")
        self.errors = errors

def _number(value: Optional[str]) -> Optional[float]:
    if value is None or str(value).strip() == "":
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None

def validate_listing(form: ListingForm, image_count: int) -> Dict[str, str]:
    """Field-scoped validation of the listing form. An empty dict means submittable."""
    errors: Dict[str, str] = {}
    for field, message in _REQUIRED_TEXT:
        if not getattr(form, field):
            errors[field] = message
    price = _number(form.price)
    if price is None or price <= 0:
        errors["price"] = "Valid price is required"
    for field, message in _REQUIRED_ADDRESS:
        if not getattr(form, field):
            errors[field] = message
    for field, message in _POSITIVE_NUMBERS:
        value = _number(getattr(form, field))
        if value is None or value <= 0:
            errors[field] = message
    year = _number(form.year)
    if year is None or year <= 1800:
        errors["year"] = "Valid year built is required"
    if _number(form.lat) is None or _number(form.lng) is None:
        errors["location"] = "Location coordinates are required"
    if form.type not in PROPERTY_TYPES:
        errors["type"] = "Invalid property type"
    if form.status not in LISTING_STATUSES:
        errors["status"] = "Invalid listing status"
    if image_count == 0:
        errors["images"] = "At least one image is required"
    return errors

class PreviewUrlRegistry:
    """Local preview URLs for selected images; each must be revoked once dropped."""

    def __init__(self):
        self._active: Set[str] = set()
        self.revoked: List[str] = []

    def create(self, image: ImageFile) -> str:
        url = f"blob:{uuid.uuid4()}"
        self._active.add(url)
        return url

    def revoke(self, url: str) -> None:
        if url in self._active:
            self._active.remove(url)
            self.revoked.append(url)

    @property
    def active(self) -> Set[str]:
        return set(self._active)

class ListingDraft:
    """Listing form state held between image selection and submission.

    ``images`` and ``preview_urls`` are parallel lists: the preview at index i
    belongs to the file at index i.
    """

    def __init__(self, registry: Optional[PreviewUrlRegistry] = None):
        self.registry = registry or PreviewUrlRegistry()
        self.images: List[ImageFile] = []
        self.preview_urls: List[str] = []
        self.amenities: List[str] = list(DEFAULT_AMENITIES)

    def add_images(self, files: Iterable[ImageFile]) -> List[str]:
        files = list(files)
        urls = [self.registry.create(f) for f in files]
        self.images.extend(files)
        self.preview_urls.extend(urls)
        return urls

    def remove_image(self, index: int) -> None:
        if not 0 <= index < len(self.images):
            raise IndexError(f"No image at index {index}")
        self.registry.revoke(self.preview_urls[index])
        del self.images[index]
        del self.preview_urls[index]

    def add_amenity(self, name: str) -> bool:
        name = (name or "").strip()
        if not name or name in self.amenities:
            return False
        self.amenities.append(name)
        return True

    def remove_amenity(self, index: int) -> None:
        del self.amenities[index]

    def clear(self) -> None:
        for url in self.preview_urls:
            self.registry.revoke(url)
        self.images.clear()
        self.preview_urls.clear()

def build_record(form: ListingForm, amenities: List[str], image_urls: List[str], user_id: str) -> dict:
    return {
        "title": form.title,
        "description": form.description,
        "price": float(form.price),
        "address": {
            "street": form.street,
            "city": form.city,
            "state": form.state,
            "zip": form.zip,
        },
        "beds": float(form.beds),
        "baths": float(form.baths),
        "sqft": float(form.sqft),
        "type": form.type,
        "year_built": int(float(form.year)),
        "images": image_urls,
        "featured": False,
        "amenities": list(amenities),
        "location": {"lat": float(form.lat), "lng": float(form.lng)},
        "status": form.status,
        "user_id": user_id,
    }

async def record_listing_action(user_id: str, property_id: str, action: str = "listing_created"):
    if not settings.DATABASE_URL:
        return
    engine = create_async_engine(settings.DATABASE_URL)
    try:
        async with AsyncSession(engine) as session:
            stmt = insert(ListingLog).values(user_id=user_id, action=action, entity_id=property_id)
            await session.execute(stmt)
            await session.commit()
    finally:
        await engine.dispose()

async def submit_listing(draft: ListingDraft, form: ListingForm, user: User, access_token: str) -> ListingCreatedResponse:
    """Validate, upload every image, then insert one listing row.

    Any failed upload aborts the submission before the insert; nothing is retried.
    """
    errors = validate_listing(form, len(draft.images))
    if errors:
        logger.info("Listing validation failed", user_id=user.id, fields=sorted(errors))
        raise ListingValidationError(errors)

    image_urls = await asyncio.gather(
        *(upload_image(image, user.id, access_token) for image in draft.images)
    )
    record = build_record(form, draft.amenities, list(image_urls), user.id)
    prop = await create_property(record, access_token)
    try:
        await record_listing_action(user.id, prop.id)
    except Exception as e:
        logger.error("Listing audit log failed", user_id=user.id, property_id=prop.id, error=str(e))
    draft.clear()
    logger.info("Listing submitted", user_id=user.id, property_id=prop.id, images=len(image_urls))
    return ListingCreatedResponse(
        property=prop,
        notification=Notification(title="Property Added", description="Your property has been added successfully!"),
    )
