"""
Whoop Coach Dashboard API Server.

FastAPI backend for the personal Whoop dashboard. Reads recovery, sleep,
strain and workout data from the Whoop API and generates coaching briefs
with Claude.

Usage:
    uvicorn dashboard.main:app --host 0.0.0.0 --port 3000 --reload

The server provides endpoints for:
- Whoop OAuth connection (/auth)
- Latest Whoop records and weekly chart data (/api)
- Plain-text morning brief and streamed coaching brief (/api)
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dashboard import __version__
from dashboard.api import API_V1_PREFIX
from dashboard.api.auth import router as auth_router
from dashboard.api.coach import router as coach_router
from dashboard.api.whoop import router as whoop_router
from dashboard.config import config
from dashboard.whoop_client import close_clients

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if config.dashboard.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_clients()


# Create FastAPI application
app = FastAPI(
    title="Whoop Coach Dashboard API",
    description="Whoop data and AI coaching briefs",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.dashboard.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(auth_router)
app.include_router(whoop_router, prefix=API_V1_PREFIX)
app.include_router(coach_router, prefix=API_V1_PREFIX)


@app.get("/")
async def root() -> Dict[str, Any]:
    """
    Root endpoint - API information.

    Returns:
        Dictionary containing API metadata and status
    """
    return {
        "name": "Whoop Coach Dashboard API",
        "version": __version__,
        "status": "operational",
        "docs": "/docs"
    }


@app.get("/health")
async def health_check() -> Dict[str, str]:
    """
    Health check endpoint for monitoring and load balancers.

    Returns:
        Dictionary containing health status
    """
    return {
        "status": "healthy",
        "service": "whoop-coach-dashboard"
    }


if __name__ == "__main__":
    import uvicorn

    logger.info("Starting Whoop Coach Dashboard API server...")
    uvicorn.run(
        "dashboard.main:app",
        host=config.dashboard.host,
        port=config.dashboard.port,
        reload=config.dashboard.debug
    )
