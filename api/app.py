"""
NicheLab API

FastAPI application that:
1. Verifies Supabase bearer tokens and keeps a profile row per identity
2. Serves niches, keywords, content and sites scoped to the caller
3. Runs AI niche research, competitive analysis and article generation
"""

import logging
import sys
from datetime import datetime

from fastapi import FastAPI

from nichelab import __version__
from nichelab.database import check_db_connection, init_db
from nichelab.utils.config import get_settings, validate_backend_settings

from . import auth, content, keywords, niches, research, sites, users
from .common import close_completion_client

# Configure logging to stdout
logging.basicConfig(
    level=getattr(logging, get_settings().LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
    force=True,  # Override any existing config
)
logger = logging.getLogger(__name__)

# Quiet down chatty loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

app = FastAPI(
    title="NicheLab",
    description="Niche research, keyword and content management powered by OpenRouter",
    version=__version__,
)

for module in (auth, users, niches, keywords, content, sites, research):
    app.include_router(module.router)


# ============================================================================
# STARTUP / SHUTDOWN
# ============================================================================

@app.on_event("startup")
async def startup_event():
    """Refuse to start without Supabase settings, then initialize the database."""
    validate_backend_settings()

    logger.info("Initializing database...")
    init_db()
    if check_db_connection():
        logger.info("Database connection verified")
    else:
        logger.warning("Database connection check failed - continuing anyway")


@app.on_event("shutdown")
async def shutdown_event():
    await close_completion_client()


# ============================================================================
# HEALTH
# ============================================================================

@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "NicheLab"}


@app.get("/api/health")
async def health():
    """Detailed health check including database status."""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "version": __version__,
        "database": "connected" if check_db_connection() else "disconnected",
    }


# ============================================================================
# RUN SERVER
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.app:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
