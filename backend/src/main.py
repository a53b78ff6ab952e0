"""Main FastAPI application entry point"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from src.api.photos import router as photos_router
from src.api.health import router as health_router, VERSION
from src.api.dependencies import store_registry
from src.api.errors import register_exception_handlers
from src.config import settings
from src.services.redis_service import RedisService

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting damage photo map API ({settings.environment})")
    yield
    store_registry.close()
    await RedisService.close()


app = FastAPI(
    title="Damage Photo Map API",
    description="Geotagged damage-assessment photos with per-user priorities and map filtering",
    version=VERSION,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)

register_exception_handlers(app)

# Include routers
app.include_router(health_router)
app.include_router(photos_router)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Damage Photo Map API",
        "version": VERSION,
        "status": "running",
    }


def run() -> None:
    """Serve the API with uvicorn"""
    import uvicorn

    uvicorn.run("src.main:app", host=settings.api_host, port=settings.api_port)
