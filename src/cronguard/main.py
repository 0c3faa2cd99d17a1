import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cronguard.config import get_settings
from cronguard.database import engine, Base
from cronguard.rate_limit import RateLimiter
from cronguard.routers import monitors, pauses, ping

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.debug else logging.DEBUG,
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Schema has to exist before the first ping or sweep touches it
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # Tests drive sweeps directly, so no background jobs there
    if not getattr(app.state, "_testing", False):
        from cronguard.scheduler import start_scheduler
        start_scheduler(app.state.rate_limiter)

    yield

    # Stop background jobs before releasing the engine
    if not getattr(app.state, "_testing", False):
        from cronguard.scheduler import stop_scheduler
        stop_scheduler()
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
)
app.state.rate_limiter = RateLimiter(
    max_requests=settings.rate_limit_requests,
    window_seconds=settings.rate_limit_window_seconds,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(monitors.router)
app.include_router(ping.router)
app.include_router(pauses.router)


@app.get("/api/health")
async def health_check():
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
    }
