"""
Barangay Analytics API

FastAPI backend for the barangay official's reports dashboard.
"""

import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from .core.config import get_settings
from .routes import analytics

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info("Starting Barangay Analytics API...")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    # Verify critical settings
    if not settings.supabase_url:
        logger.warning("Supabase URL not configured!")
    if not settings.jwt_secret:
        logger.warning("JWT secret not configured; all requests will be rejected")

    yield

    # Shutdown
    logger.info("Shutting down Barangay Analytics API...")


# Create FastAPI app
app = FastAPI(
    title="Barangay Analytics API",
    description="Demographic, occupancy, booking and market analytics per barangay",
    version="1.0.0",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(analytics.router, prefix="/api", tags=["Analytics"])


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "status": "ok",
        "service": "Barangay Analytics API",
        "version": "1.0.0"
    }


@app.get("/health")
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "supabase_configured": bool(settings.supabase_url and settings.supabase_service_key),
        "auth_configured": bool(settings.jwt_secret),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("brgy_analytics.main:app", host="0.0.0.0", port=8000, reload=True)
