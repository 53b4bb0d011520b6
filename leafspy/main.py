"""
LeafSpy Telemetry - FastAPI Backend

Main application entry point and configuration.
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from leafspy.api.logs import router as logs_router, folder_router
from leafspy.services.repository import init_repository, get_repository


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


APP_NAME = "LeafSpy Telemetry"
APP_VERSION = "0.1.0"

# Default data folder (can be overridden via API or environment)
DEFAULT_DATA_FOLDER = Path("./data/logs")
DATA_FOLDER_ENV = "LEAFSPY_DATA_FOLDER"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info(f"Starting {APP_NAME} backend")

    repo = get_repository()
    if repo.data_folder is None:
        data_folder = Path(os.getenv(DATA_FOLDER_ENV, str(DEFAULT_DATA_FOLDER)))
        if data_folder.exists():
            init_repository(data_folder)
            logger.info(f"Initialized repository with folder: {data_folder}")
        else:
            logger.info(f"Default data folder not found: {data_folder}")
            logger.info("Use POST /folder to set data folder")

    yield

    logger.info(f"Shutting down {APP_NAME} backend")


app = FastAPI(
    title=APP_NAME,
    description="""
    Read-only API over LeafSpy (Nissan Leaf) CSV logs.

    ## Features
    - Decode every LeafSpy log row into typed, unit-normalized records
    - Report rows that could not be decoded
    - Page through decoded records

    ## Data Flow
    1. Set data folder via POST /folder
    2. List available logs via GET /logs
    3. Inspect a log via GET /logs/{id}
    4. Get records via GET /logs/{id}/records
    """,
    version=APP_VERSION,
    lifespan=lifespan,
)


# CORS middleware (allow all origins for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(logs_router)
app.include_router(folder_router)


@app.get("/")
async def root():
    """Root endpoint - basic health check."""
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    repo = get_repository()

    return {
        "status": "healthy",
        "data_folder": str(repo.data_folder) if repo.data_folder else None,
        "log_count": repo.log_count,
    }
