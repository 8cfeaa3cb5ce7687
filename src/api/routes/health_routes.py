"""
Health check routes for monitoring.
"""
from fastapi import APIRouter
from src.core import config

router = APIRouter(prefix="/v1/api", tags=["Health"])


@router.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "service": config.settings.api_title,
        "version": config.settings.api_version,
        "upload_backend": config.settings.upload_backend
    }
