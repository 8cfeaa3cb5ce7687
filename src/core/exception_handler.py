"""
Global exception handler for the Image Upload Queue API.
Provides centralized error handling for all API exceptions.
"""
import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from .exceptions import (
    EntryNotFoundException,
    InvalidTransitionException,
    ValidationException
)

logger = structlog.get_logger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application."""

    @app.exception_handler(EntryNotFoundException)
    async def handle_not_found(request: Request, exc: EntryNotFoundException):
        return JSONResponse(
            status_code=404,
            content={"error": "Not Found", "message": exc.message}
        )

    @app.exception_handler(ValidationException)
    async def handle_validation_error(request: Request, exc: ValidationException):
        return JSONResponse(
            status_code=400,
            content={"error": "Validation Error", "message": exc.message}
        )

    @app.exception_handler(InvalidTransitionException)
    async def handle_invalid_transition(request: Request, exc: InvalidTransitionException):
        return JSONResponse(
            status_code=409,
            content={"error": "Invalid Transition", "message": exc.message}
        )

    @app.exception_handler(Exception)
    async def handle_generic_error(request: Request, exc: Exception):
        logger.exception("unhandled_error", path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal Server Error", "message": "An unexpected error occurred"}
        )
