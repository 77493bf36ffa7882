"""
FastAPI Main Application

Vehicle Registry Sync REST API.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from config.settings import settings
from src import __version__
from src.vehicle_registry.api.dependencies import get_db
from src.vehicle_registry.db.session import close_connections
from src.vehicle_registry.api.schemas import HealthCheck
from src.vehicle_registry.api.routers import stats, sync
from src.vehicle_registry.exceptions import RegistryConfigurationError
from src.vehicle_registry.utils.logger import get_logger, setup_logging
from src.vehicle_registry.utils.timeutils import utc_now

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("api_started", version=__version__)
    yield
    close_connections()


app = FastAPI(
    title="Vehicle Registry Sync API",
    description="Keeps cached DVLA vehicle facts and MOT status fresh for dealer stock",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Include routers
app.include_router(sync.router)
app.include_router(stats.router)


@app.exception_handler(RegistryConfigurationError)
def registry_not_configured(request: Request, exc: RegistryConfigurationError):
    """Missing registry credential: the subsystem is unavailable, not the request invalid."""
    logger.error("registry_not_configured", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=503, content={"detail": exc.message})


@app.get("/health", response_model=HealthCheck, tags=["health"])
def health_check(db: Session = Depends(get_db)):
    """
    Health check endpoint.

    Returns:
        Health status with database connectivity and registry credential checks
    """
    try:
        db.execute(text("SELECT 1"))
        database_status = "connected"
    except SQLAlchemyError as e:
        database_status = f"error: {str(e)}"

    registry_configured = bool(settings.registry_api_key and settings.registry_api_key.strip())

    return HealthCheck(
        status="healthy" if database_status == "connected" and registry_configured else "degraded",
        version=__version__,
        database=database_status,
        registry_configured=registry_configured,
        timestamp=utc_now(),
    )


@app.get("/", tags=["root"])
def root():
    """
    Root endpoint.

    Returns:
        API information
    """
    return {
        "name": "Vehicle Registry Sync API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.vehicle_registry.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
