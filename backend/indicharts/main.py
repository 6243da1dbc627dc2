"""
IndiCharts Backend - FastAPI Application

Main entry point for the indicator and alert API.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from indicharts.core.config import settings
from indicharts.api.v1 import router as api_v1_router

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Max candles per request: {settings.max_candles}")

    yield

    # Shutdown
    logger.info("Shutting down...")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    IndiCharts Indicator Engine API

    ## Architecture
    - **Indicator Engine**: RSI, Stochastic and Williams %R over OHLC candles
    - **Zone Classifier**: below / between / above configured levels
    - **Signal Detector**: level crosses and zone entries/exits
    - **Alert Checks**: rule evaluation with per-rule cooldowns

    ## Core Principles
    - Every indicator value maps to exactly one candle
    - Short histories yield empty series, never errors
    - All state is passed in and handed back by the caller
    """,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_v1_router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "IndiCharts Indicator Engine API",
        "docs": "/docs",
        "health": "/health",
    }
