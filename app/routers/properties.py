from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from typing import List, Optional
from structlog import get_logger
from app.dependencies.auth import get_current_user, oauth2_scheme
from app.dependencies.filters import listing_filters
from app.schemas.auth import User
from app.schemas.listing import (
    AmenityListResponse,
    ListingCreatedResponse,
    ListingForm,
    ListingValidationResponse,
    Notification,
)
from app.schemas.property import FilterOptions, Property, PropertyListResponse
from app.services.catalog import AMENITIES
from app.services.listing_form import ListingDraft, ListingValidationError, submit_listing
from app.services.properties import (
    ListingSubmissionError,
    fetch_properties,
    fetch_property_by_id,
    fetch_similar_properties,
)
from app.services.storage import ImageFile

logger = get_logger()
router = APIRouter(prefix="/api/v1/properties", tags=["properties"])

@router.get("", response_model=PropertyListResponse)
async def list_properties(
    filters: FilterOptions = Depends(listing_filters),
    sort_by: str = "featured",
    limit: Optional[int] = None,
    featured: Optional[bool] = None,
):
    """Filtered and sorted listings. Upstream failures yield an empty list."""
    properties = await fetch_properties(filters=filters, sort_by=sort_by, limit=limit, featured=featured)
    logger.info("Listed properties", total=len(properties), sort_by=sort_by)
    return {"total": len(properties), "items": properties}

@router.get("/featured", response_model=PropertyListResponse)
async def list_featured_properties(limit: Optional[int] = None):
    properties = await fetch_properties(featured=True, limit=limit)
    return {"total": len(properties), "items": properties}

@router.get("/amenities", response_model=AmenityListResponse)
async def list_amenities():
    return {"amenities": AMENITIES}

@router.get("/{property_id}", response_model=Property)
async def get_property(property_id: str):
    prop = await fetch_property_by_id(property_id)
    if prop is None:
        raise HTTPException(status_code=404, detail="Property not found")
    logger.info("Fetched property details", property_id=property_id)
    return prop

@router.get("/{property_id}/similar", response_model=List[Property])
async def get_similar_properties(property_id: str, limit: int = 3):
    prop = await fetch_property_by_id(property_id)
    if prop is None:
        raise HTTPException(status_code=404, detail="Property not found")
    return await fetch_similar_properties(prop, limit=limit)

@router.post("", response_model=ListingCreatedResponse, status_code=201)
async def create_listing(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    street: Optional[str] = Form(None),
    city: Optional[str] = Form(None),
    state: Optional[str] = Form(None),
    zip: Optional[str] = Form(None),
    beds: Optional[str] = Form(None),
    baths: Optional[str] = Form(None),
    sqft: Optional[str] = Form(None),
    year: Optional[str] = Form(None),
    lat: Optional[str] = Form(None),
    lng: Optional[str] = Form(None),
    type: str = Form("house"),
    status: str = Form("sale"),
    amenities: Optional[List[str]] = Form(None),
    images: List[UploadFile] = File(default=[]),
    user: User = Depends(get_current_user),
    token: str = Depends(oauth2_scheme),
):
    form = ListingForm(
        title=title,
        description=description,
        price=price,
        street=street,
        city=city,
        state=state,
        zip=zip,
        beds=beds,
        baths=baths,
        sqft=sqft,
        year=year,
        lat=lat,
        lng=lng,
        type=type,
        status=status,
    )
    draft = ListingDraft()
    draft.add_images([
        ImageFile(
            filename=upload.filename or "image",
            content=await upload.read(),
            content_type=upload.content_type or "application/octet-stream",
        )
        for upload in images
        if upload.filename
    ])
    if amenities:
        draft.amenities = []
        for name in amenities:
            draft.add_amenity(name)

    try:
        return await submit_listing(draft, form, user, token)
    except ListingValidationError as e:
        body = ListingValidationResponse(
            errors=e.errors,
            notification=Notification(
                title="Validation Error",
                description="Please fix the errors in the form.",
                variant="destructive",
            ),
        )
        raise HTTPException(status_code=422, detail=body.model_dump())
    except ListingSubmissionError as e:
        logger.error("Listing submission failed", user_id=user.id, error=str(e))
        notification = Notification(title="Error", description=str(e), variant="destructive")
        raise HTTPException(status_code=502, detail={"notification": notification.model_dump()})
    finally:
        draft.clear()
