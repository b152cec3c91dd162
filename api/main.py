"""
FastAPI application initialization
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from api.routes import health, snapshots
from core.config import settings
from core.exceptions import ETLException
from core.logging import setup_logging
from schemas.api import ErrorResponse
import logging
from api.middleware import RequestContextMiddleware
from ingestion.scheduler import ETLScheduler

setup_logging()

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="PriceCatcher Snapshot API",
    description="Read-only access to the published price snapshots",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestContextMiddleware)

# Initialize Scheduler
scheduler = ETLScheduler()


# Include routers
app.include_router(health.router)
app.include_router(snapshots.router)


@app.exception_handler(ETLException)
async def etl_exception_handler(request: Request, exc: ETLException):
    logger.error(f"Request failed: {exc}", extra={"error_context": exc.to_dict()})
    body = ErrorResponse(error=type(exc).__name__, detail=exc.message)
    return JSONResponse(status_code=500, content=body.model_dump(mode="json"))


@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    logger.info("Starting PriceCatcher Snapshot API")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Snapshots: {settings.OUTPUT_DIR}")

    if settings.SCHEDULER_ENABLED:
        scheduler.start()


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event"""
    logger.info("Shutting down PriceCatcher Snapshot API")
    scheduler.stop()


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "PriceCatcher Snapshot API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "snapshots": "/snapshots",
            "prices": "/snapshots/{period}/prices"
        }
    }
