"""
Main FastAPI application entry point.
Configures and initializes the Image Upload Queue API.
"""
import structlog
from fastapi import FastAPI, Request
from src.core.config import settings
from src.core.exception_handler import register_exception_handlers
from src.core.logging import configure_logging
from src.api.routes import health_routes, queue_routes

configure_logging()
logger = structlog.get_logger(__name__)

# Create FastAPI application
app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description="Upload queue for a remote image processing service"
)

# Register exception handlers
register_exception_handlers(app)

# Register routes
app.include_router(health_routes.router)
app.include_router(queue_routes.router)

# Middleware to log request paths
@app.middleware("http")
async def log_request(request: Request, call_next):
    logger.info("request", method=request.method, path=request.url.path)
    response = await call_next(request)
    return response


# For local development
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
