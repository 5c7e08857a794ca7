"""
KenyDrive API — Application entry point.

Bootstraps FastAPI, wires up middleware, registers route groups,
and mounts / unmounts the dashboard refresh cycle.

Extension points:
  - Add new route groups with app.include_router() below
  - Add new middleware in the middleware block
  - Change startup behaviour in the lifespan context manager

Run locally:
  uvicorn kenydrive.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from kenydrive.core.config import API_VERSION, settings
from kenydrive.core.rate_limit import limiter
from kenydrive.routes.apps import router as apps_router
from kenydrive.routes.dashboard import router as dashboard_router
from kenydrive.routes.health import router as health_router
from kenydrive.routes.predictions import router as predictions_router
from kenydrive.services.dashboard import dashboard_controller

# ─── Logging ───────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ─── Lifespan ──────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage startup and shutdown lifecycle.

    Startup mounts the dashboard (first fetch + 15-minute timer); shutdown
    cancels the timer. In-flight fetches are not cancelled.
    """
    logger.info("Starting KenyDrive API (env: %s)", settings.environment)
    await dashboard_controller.mount()
    yield
    logger.info("Shutting down KenyDrive API")
    await dashboard_controller.unmount()


# ─── App ───────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="KenyDrive API",
    description=(
        "AI-assisted peak-hour demand dashboard for Nairobi rideshare drivers. "
        "Forecasts are generated by Gemini and are not guaranteed."
    ),
    version=API_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.environment != "production" else None,
    redoc_url="/redoc" if settings.environment != "production" else None,
)


# ─── Rate limiting ─────────────────────────────────────────────────────────────
# Routes opt-in with @limiter.limit("N/minute") + request: Request parameter.
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# ─── Middleware ─────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ─── Routes ────────────────────────────────────────────────────────────────────
app.include_router(health_router, prefix="/health", tags=["health"])
app.include_router(predictions_router)
app.include_router(dashboard_router)
app.include_router(apps_router)


@app.get("/", tags=["root"])
async def root():
    """API root — basic metadata."""
    return {
        "name": "KenyDrive API",
        "version": API_VERSION,
        "status": "running",
        "environment": settings.environment,
        "docs": "/docs",
    }
