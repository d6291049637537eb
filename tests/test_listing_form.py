import pytest
from unittest.mock import AsyncMock, MagicMock
from app.schemas.auth import User
from app.schemas.listing import ListingForm
from app.services.catalog import sample_catalog
from app.services.listing_form import (
    ListingDraft,
    ListingValidationError,
    PreviewUrlRegistry,
    record_listing_action,
    submit_listing,
    validate_listing,
)
from app.services.properties import ListingSubmissionError
from app.services.storage import ImageFile

VALID = dict(
    title="Sunny Condo",
    description="Corner unit with a view",
    price="450000",
    street="1 Bay St",
    city="San Diego",
    state="CA",
    zip="92101",
    beds="2",
    baths="1.5",
    sqft="1100",
    year="1999",
    lat="32.71",
    lng="-117.16",
    type="condo",
    status="sale",
)

def images(n):
    return [ImageFile(f"photo{i}.jpg", b"img", "image/jpeg") for i in range(n)]

def test_empty_form_reports_every_field():
    errors = validate_listing(ListingForm(), 0)
    assert set(errors) == {
        "title", "description", "price", "street", "city", "state", "zip",
        "beds", "baths", "sqft", "year", "location", "images",
    }
    assert errors["images"] == "At least one image is required"
    assert errors["price"] == "Valid price is required"

def test_valid_form_has_no_errors():
    assert validate_listing(ListingForm(**VALID), 1) == {}

@pytest.mark.parametrize("field,value,key", [
    ("price", "0", "price"),
    ("price", "-5", "price"),
    ("beds", "0", "beds"),
    ("sqft", "abc", "sqft"),
    ("year", "1800", "year"),
    ("lat", "", "location"),
    ("lng", None, "location"),
    ("zip", "", "zip"),
    ("type", "castle", "type"),
    ("status", "leased", "status"),
    ("price", "nan", "price"),
    ("price", "inf", "price"),
    ("beds", "nan", "beds"),
    ("year", "nan", "year"),
    ("year", "inf", "year"),
    ("lat", "nan", "location"),
    ("lat", "inf", "location"),
    ("lng", "-inf", "location"),
])
def test_field_rules(field, value, key):
    form = ListingForm(**{**VALID, field: value})
    assert set(validate_listing(form, 1)) == {key}

def test_year_after_1800_is_valid():
    assert validate_listing(ListingForm(**{**VALID, "year": "1801"}), 1) == {}

def test_removing_an_image_revokes_only_its_preview():
    registry = PreviewUrlRegistry()
    draft = ListingDraft(registry)
    files = images(3)
    urls = draft.add_images(files)
    assert draft.preview_urls == urls
    assert registry.active == set(urls)

    draft.remove_image(1)

    assert registry.revoked == [urls[1]]
    assert registry.active == {urls[0], urls[2]}
    assert draft.images == [files[0], files[2]]
    assert draft.preview_urls == [urls[0], urls[2]]

def test_remove_image_out_of_range():
    draft = ListingDraft()
    draft.add_images(images(1))
    with pytest.raises(IndexError):
        draft.remove_image(3)
    assert len(draft.images) == 1

def test_amenities_are_trimmed_and_deduplicated():
    draft = ListingDraft()
    assert draft.amenities == ["Air Conditioning"]
    assert draft.add_amenity("  Pool ") is True
    assert draft.add_amenity("Pool") is False
    assert draft.add_amenity("   ") is False
    draft.remove_amenity(0)
    assert draft.amenities == ["Pool"]

@pytest.mark.asyncio
async def test_submit_without_images_makes_no_network_call(monkeypatch):
    upload = AsyncMock()
    insert = AsyncMock()
    monkeypatch.setattr("app.services.listing_form.upload_image", upload)
    monkeypatch.setattr("app.services.listing_form.create_property", insert)

    with pytest.raises(ListingValidationError) as exc:
        await submit_listing(ListingDraft(), ListingForm(**VALID), User(id="u1"), "tok")

    assert exc.value.errors == {"images": "At least one image is required"}
    upload.assert_not_awaited()
    insert.assert_not_awaited()

@pytest.mark.asyncio
async def test_submit_uploads_then_inserts_one_record(monkeypatch):
    stored = sample_catalog()[0]
    upload = AsyncMock(side_effect=["https://cdn/a.jpg", "https://cdn/b.jpg"])
    insert = AsyncMock(return_value=stored)
    monkeypatch.setattr("app.services.listing_form.upload_image", upload)
    monkeypatch.setattr("app.services.listing_form.create_property", insert)

    draft = ListingDraft()
    draft.add_images(images(2))
    draft.add_amenity("Balcony")
    result = await submit_listing(draft, ListingForm(**VALID), User(id="u1", email="a@b.c"), "tok")

    assert result.property == stored
    assert result.notification.title == "Property Added"
    assert upload.await_count == 2
    assert all(call.args[1] == "u1" for call in upload.await_args_list)
    record, token = insert.await_args.args
    assert token == "tok"
    assert record["images"] == ["https://cdn/a.jpg", "https://cdn/b.jpg"]
    assert record["user_id"] == "u1"
    assert record["featured"] is False
    assert record["year_built"] == 1999
    assert record["price"] == 450000.0
    assert record["address"] == {"street": "1 Bay St", "city": "San Diego", "state": "CA", "zip": "92101"}
    assert record["location"] == {"lat": 32.71, "lng": -117.16}
    assert record["amenities"] == ["Air Conditioning", "Balcony"]
    assert draft.images == []

@pytest.mark.asyncio
async def test_one_failed_upload_aborts_the_submission(monkeypatch):
    upload = AsyncMock(side_effect=["https://cdn/a.jpg", ListingSubmissionError("Error uploading image: denied")])
    insert = AsyncMock()
    monkeypatch.setattr("app.services.listing_form.upload_image", upload)
    monkeypatch.setattr("app.services.listing_form.create_property", insert)

    draft = ListingDraft()
    draft.add_images(images(2))
    with pytest.raises(ListingSubmissionError, match="denied"):
        await submit_listing(draft, ListingForm(**VALID), User(id="u1"), "tok")
    insert.assert_not_awaited()

@pytest.mark.asyncio
async def test_non_finite_year_never_reaches_storage(monkeypatch):
    upload = AsyncMock()
    monkeypatch.setattr("app.services.listing_form.upload_image", upload)
    draft = ListingDraft()
    draft.add_images(images(1))

    with pytest.raises(ListingValidationError) as exc:
        await submit_listing(draft, ListingForm(**{**VALID, "year": "nan"}), User(id="u1"), "tok")

    assert set(exc.value.errors) == {"year"}
    upload.assert_not_awaited()

@pytest.mark.asyncio
async def test_audit_log_failure_keeps_the_created_listing(monkeypatch):
    stored = sample_catalog()[0]
    insert = AsyncMock(return_value=stored)
    monkeypatch.setattr("app.services.listing_form.upload_image", AsyncMock(return_value="https://cdn/a.jpg"))
    monkeypatch.setattr("app.services.listing_form.create_property", insert)
    monkeypatch.setattr("app.services.listing_form.record_listing_action", AsyncMock(side_effect=OSError("db down")))

    draft = ListingDraft()
    draft.add_images(images(1))
    result = await submit_listing(draft, ListingForm(**VALID), User(id="u1"), "tok")

    assert result.notification.title == "Property Added"
    insert.assert_awaited_once()
    assert draft.images == []

def fake_database(monkeypatch, execute_error=None):
    engine = MagicMock()
    engine.dispose = AsyncMock()
    session = MagicMock()
    session.execute = AsyncMock(side_effect=execute_error)
    session.commit = AsyncMock()
    session_factory = MagicMock()
    session_factory.return_value.__aenter__ = AsyncMock(return_value=session)
    session_factory.return_value.__aexit__ = AsyncMock(return_value=False)
    monkeypatch.setattr("app.config.settings.DATABASE_URL", "postgresql+asyncpg://db/listings")
    monkeypatch.setattr("app.services.listing_form.create_async_engine", MagicMock(return_value=engine))
    monkeypatch.setattr("app.services.listing_form.AsyncSession", session_factory)
    return engine, session

@pytest.mark.asyncio
async def test_record_listing_action_inserts_audit_row(monkeypatch):
    engine, session = fake_database(monkeypatch)

    await record_listing_action("u1", "p1")

    stmt = session.execute.await_args.args[0]
    params = stmt.compile().params
    assert stmt.table.name == "ListingLogs"
    assert params["user_id"] == "u1"
    assert params["action"] == "listing_created"
    assert params["entity_id"] == "p1"
    session.commit.assert_awaited_once()
    engine.dispose.assert_awaited_once()

@pytest.mark.asyncio
async def test_record_listing_action_disposes_engine_on_failure(monkeypatch):
    engine, session = fake_database(monkeypatch, execute_error=OSError("db down"))

    with pytest.raises(OSError):
        await record_listing_action("u1", "p1")

    session.commit.assert_not_awaited()
    engine.dispose.assert_awaited_once()

@pytest.mark.asyncio
async def test_record_listing_action_skipped_without_database(monkeypatch):
    monkeypatch.setattr("app.config.settings.DATABASE_URL", "")
    engine_factory = MagicMock()
    monkeypatch.setattr("app.services.listing_form.create_async_engine", engine_factory)

    await record_listing_action("u1", "p1")

    engine_factory.assert_not_called()
