from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi_limiter import FastAPILimiter
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from structlog import get_logger
from app.routers import auth
from app.routers import health
from app.routers import map_view
from app.routers import properties
from app.services.health import get_redis_client, update_health_cache

logger = get_logger()

app = FastAPI(title="Listing Browser Service")
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_credentials=True, allow_methods=["*"], allow_headers=["*"])

scheduler = AsyncIOScheduler()

async def refresh_health_cache():
    try:
        await update_health_cache()
    except Exception as e:
        logger.warning("Health cache refresh failed", error=str(e))

@app.on_event("startup")
async def startup_event():
    redis_client = await get_redis_client()
    await FastAPILimiter.init(redis_client)
    # Run once immediately on startup
    await refresh_health_cache()
    # Schedule to run every 5 minutes
    scheduler.add_job(refresh_health_cache, "interval", minutes=5)
    scheduler.start()

@app.on_event("shutdown")
async def shutdown_event():
    scheduler.shutdown()
    await FastAPILimiter.close()

app.include_router(auth.router)
app.include_router(properties.router)
app.include_router(map_view.router)
app.include_router(health.router)

@app.get("/health")
async def root_health():
    return "ok"
