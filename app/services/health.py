from httpx import AsyncClient
from redis.asyncio import Redis
from structlog import get_logger
from app.config import settings
import json

logger = get_logger()

CACHE_KEY = "cached_health_status"
CACHE_TTL = 300

redis_client: Redis | None = None

async def get_redis_client() -> Redis:
    global redis_client
    if redis_client is None:
        redis_client = Redis.from_url(settings.REDIS_URL)
    return redis_client

_supabase_base = settings.SUPABASE_URL.rstrip("/")

# service key -> health path on the Supabase gateway
_endpoints = {
    "rest": "/rest/v1/",
    "storage": "/storage/v1/status",
    "auth": "/auth/v1/health",
}

async def check_services(verbose: bool = False) -> dict:
    health = {}
    headers = {"apikey": settings.SUPABASE_KEY}
    async with AsyncClient(timeout=10.0) as client:
        for service, path in _endpoints.items():
            url = f"{_supabase_base}{path}"
            try:
                resp = await client.get(url, headers=headers)
                entry = {"status": "ok" if resp.status_code < 400 else "error", "status_code": resp.status_code}
            except Exception as e:
                entry = {"status": "error", "error": f"{type(e).__name__}: {e}"}
            if verbose:
                entry["url"] = url
            health[service] = entry
    return health

async def get_health(verbose: bool = False) -> dict:
    if not verbose:
        try:
            redis = await get_redis_client()
            cached = await redis.get(CACHE_KEY)
            if cached:
                logger.info("Returning cached health status")
                return json.loads(cached)
        except Exception as e:
            logger.warning("Health cache unavailable", error=str(e))
    health = await check_services(verbose=verbose)
    logger.info("Checked upstream health", services={k: v["status"] for k, v in health.items()})
    return health

async def update_health_cache() -> None:
    health = await check_services()
    redis = await get_redis_client()
    await redis.setex(CACHE_KEY, CACHE_TTL, json.dumps(health))
