# location_directory/main.py
from fastapi import Depends, FastAPI
from contextlib import asynccontextmanager
from beanie import init_beanie
from pymongo import AsyncMongoClient

import logging

from location_directory.configs import configs, get_setting
from location_directory.dependencies.store import get_location_store
from location_directory.models.location import LocationDocument
from location_directory.routes import locations
from location_directory.routes.error_handlers import register_error_handlers
from location_directory.schemas.misc import HealthStatus
from location_directory.services.location_store import (
    BeanieLocationStore,
    LocationStore,
)
from location_directory.services.memory_store import InMemoryLocationStore
from fastapi.middleware.cors import CORSMiddleware


# Configure logging
logging.basicConfig(
    level=str(get_setting("logging", "level", "LOG_LEVEL", "INFO")).upper(),
    format=get_setting(
        "logging", "format", default="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    ),
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Opens the location store for the application's lifetime.
    `store.backend: mongo` connects to MongoDB and initializes Beanie;
    `memory` keeps the directory in-process.
    """
    logger.info("Application startup initiated...")
    backend = get_setting("store", "backend", "STORE_BACKEND", "mongo")
    client = None

    if backend == "memory":
        app.state.location_store = InMemoryLocationStore()
        logger.info("Using in-memory location store.")
    else:
        try:
            client = AsyncMongoClient(get_setting("store", "mongo_uri", "MONGO_URI"))
            await init_beanie(
                database=client[get_setting("store", "mongo_db", "MONGO_DB")],
                document_models=[LocationDocument],
            )
            logger.info("MongoDB connection and Beanie initialization successful.")
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB or initialize Beanie: {e}")
            raise
        app.state.location_store = BeanieLocationStore()

    yield

    logger.info("Application shutdown initiated...")
    if client is not None:
        await client.close()
        logger.info("MongoDB connection closed.")


app = FastAPI(
    title=get_setting("app", "project_name", "APP_NAME", "Location Directory"),
    debug=str(get_setting("app", "debug_mode", "DEBUG", False)).lower() in ("1", "true", "yes"),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=configs.get("app", {}).get("cors_origins", []),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)
app.include_router(locations.router, prefix="/locations", tags=["Locations"])


@app.get("/health", response_model=HealthStatus)
async def health(store: LocationStore = Depends(get_location_store)):
    return HealthStatus(status="ok", store=store.backend)
