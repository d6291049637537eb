from dataclasses import dataclass
from httpx import AsyncClient
from structlog import get_logger
from app.config import settings
from app.services.properties import ListingSubmissionError, supabase_headers
import uuid

logger = get_logger()

_supabase_base = settings.SUPABASE_URL.rstrip("/")

@dataclass(frozen=True)
class ImageFile:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

def object_path(user_id: str, filename: str) -> str:
    """Random object name under the uploader's folder, keeping the file extension."""
    ext = filename.rsplit(".", 1)[-1] if "." in filename else "bin"
    return f"{user_id}/{uuid.uuid4().hex[:13]}.{ext}"

def public_url(path: str, bucket: str | None = None) -> str:
    return f"{_supabase_base}/storage/v1/object/public/{bucket or settings.IMAGES_BUCKET}/{path}"

async def upload_image(image: ImageFile, user_id: str, access_token: str | None = None) -> str:
    """Upload one image to the property images bucket and return its public URL."""
    bucket = settings.IMAGES_BUCKET
    path = object_path(user_id, image.filename)
    try:
        async with AsyncClient(timeout=settings.HTTP_TIMEOUT) as client:
            response = await client.post(
                f"{_supabase_base}/storage/v1/object/{bucket}/{path}",
                content=image.content,
                headers={**supabase_headers(access_token), "Content-Type": image.content_type},
            )
    except Exception as e:
        logger.error("Image upload request failed", path=path, error=str(e))
        raise ListingSubmissionError(f"Error uploading image: {e}") from e
    if not 200 <= response.status_code < 300:
        try:
            err = response.json().get("message") or response.text
        except Exception:
            err = response.text or "Upstream error"
        logger.warning("Image upload rejected", path=path, status_code=response.status_code, error=err)
        raise ListingSubmissionError(f"Error uploading image: {err}")
    logger.info("Uploaded property image", path=path)
    return public_url(path, bucket)
