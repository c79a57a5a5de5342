from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any
from datetime import datetime, timezone
import logging

from shelterfinder.api import shelters, preferences
from shelterfinder.api.deps import get_registry, get_storage
from shelterfinder.config import settings
from shelterfinder.exceptions import MalformedSourceError, ShelterFinderError, StorageWriteError
from shelterfinder.core.importer import ShelterImporter
from shelterfinder.database import create_db_and_tables

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

async def load_initial_shelters(app: FastAPI):
    """Fill the registry from storage, importing the data document when storage is empty"""
    storage = app.dependency_overrides.get(get_storage, get_storage)()
    registry = app.dependency_overrides.get(get_registry, get_registry)()

    await registry.refresh(storage)
    if len(registry):
        return

    importer = ShelterImporter(storage)
    try:
        if settings.SHELTER_DATA_URL:
            registry.replace(await importer.import_from_url(settings.SHELTER_DATA_URL))
        elif Path(settings.SHELTER_DATA_PATH).exists():
            registry.replace(await importer.import_from_file(settings.SHELTER_DATA_PATH))
        else:
            logger.warning(f"No shelter data available at {settings.SHELTER_DATA_PATH}")
    except ShelterFinderError as e:
        logger.error(f"Initial shelter import failed: {e}")

# Lifespan manager for startup/shutdown events
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    await create_db_and_tables()
    await load_initial_shelters(app)
    logger.info("Application starting up")
    yield
    # Shutdown
    logger.info("Application shutting down")

app = FastAPI(
    title="Shelter Finder API",
    description="Nearest emergency shelters from a validated offline shelter set",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(shelters.router, prefix="/api/shelters", tags=["Shelters"])
app.include_router(preferences.router, prefix="/api/preferences", tags=["Preferences"])

@app.exception_handler(MalformedSourceError)
async def malformed_source_handler(request: Request, exc: MalformedSourceError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})

@app.exception_handler(StorageWriteError)
async def storage_write_handler(request: Request, exc: StorageWriteError):
    return JSONResponse(status_code=503, content={"detail": str(exc)})

@app.get("/")
async def root():
    return {
        "message": "Shelter Finder API",
        "status": "active",
        "version": "1.0.0",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }

# Health check endpoint
@app.get("/health")
async def health_check() -> dict[str, Any]:
    registry = get_registry()
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "shelters_loaded": len(registry),
        "loaded_at": registry.loaded_at.isoformat() if registry.loaded_at else None
    }
