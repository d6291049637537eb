from fastapi import APIRouter
from structlog import get_logger
from app.services.health import get_health

logger = get_logger()
router = APIRouter(prefix="/api/v1", tags=["health"])

@router.get("/health")
async def check_health(verbose: bool = False):
    """Supabase REST, Storage and Auth status. Use verbose=true to bypass the cache and include URLs."""
    health = await get_health(verbose=verbose)
    logger.info("Fetched health status", verbose=verbose)
    return health
