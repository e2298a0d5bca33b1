# stylist/api/routes.py
# API router aggregation and health checks

import logging
from fastapi import APIRouter, Request
from stylist.exceptions import ServerError
from stylist.routes.auth import router as auth_router

logger = logging.getLogger(__name__)

router = APIRouter()
router.include_router(auth_router, prefix="/auth", tags=["auth"])

health_router = APIRouter()


@health_router.get("/")
def root(request: Request):
    """Return a basic health check message."""
    logger.info("Health check endpoint accessed")
    if not request.app.state.database.ping():
        raise ServerError("Database connection error")
    return {"message": "Stylist API is running"}


@health_router.get("/health")
def health(request: Request):
    """Report API status along with the MongoDB connection state."""
    connected = request.app.state.database.ping()
    return {
        "status": "ok",
        "mongodb": "connected" if connected else "disconnected",
    }
