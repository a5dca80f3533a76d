from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi_limiter import FastAPILimiter
from redis.asyncio import Redis
from sqlalchemy import text
from structlog import get_logger

from listing_match.config import settings
from listing_match.core.logging import setup_logging
from listing_match.database import AsyncSessionFactory
from listing_match.routers import comparisons, preferences, properties

logger = get_logger()

app = FastAPI(title="Listing Match Service")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "https://*.vercel.app",
        "https://*.hf.space",
        "http://localhost:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(preferences.router)
app.include_router(properties.router)
app.include_router(comparisons.router)


@app.on_event("startup")
async def startup_event():
    setup_logging()
    # Rate limiting needs Redis; without it the service runs unthrottled
    try:
        if settings.REDIS_URL:
            redis = Redis.from_url(settings.REDIS_URL)
            await FastAPILimiter.init(redis)
    except Exception as e:
        logger.warning("Rate limiter disabled, Redis unavailable", error=str(e))


@app.get("/health", tags=["health"])
async def health():
    details = {"status": "ok"}
    try:
        async with AsyncSessionFactory() as session:
            result = await session.execute(text("SELECT COUNT(1) FROM property_features"))
            details["feature_catalog_size"] = int(result.scalar() or 0)
        details["database"] = "up"
    except Exception as e:
        details["status"] = "degraded"
        details["database"] = f"down: {str(e)}"
    # Config presence checks (no secrets exposed)
    details["config"] = {
        "db_url_set": bool(settings.DATABASE_URL),
        "redis_url_set": bool(settings.REDIS_URL),
        "rate_limiter_active": FastAPILimiter.redis is not None,
        "gemini_key_set": settings.GEMINI_API_KEY not in (None, "", "your_gemini_key"),
    }
    return details
