"""
Core configuration for the Image Upload Queue service.
Manages environment variables, upload backend and AWS service settings.
"""
import os
import structlog
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # AWS Configuration
    aws_region: str = os.getenv("AWS_REGION", "us-east-1")
    s3_bucket_name: str = os.getenv("S3_BUCKET_NAME", "")

    # Upload backend: "image_api" (remote image service) or "s3"
    upload_backend: str = os.getenv("UPLOAD_BACKEND", "image_api")

    # Remote image API
    image_api_url: str = os.getenv("IMAGE_API_URL", "http://localhost:5000/api")
    image_api_timeout_seconds: float = float(os.getenv("IMAGE_API_TIMEOUT_SECONDS", "30"))
    image_api_token: str = os.getenv("IMAGE_API_TOKEN", "")

    # API Configuration
    api_title: str = os.getenv("API_TITLE", "Image Upload Queue API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")

    # File picking limits
    max_file_size_mb: int = int(os.getenv("MAX_FILE_SIZE_MB", "10"))
    max_batch_files: int = int(os.getenv("MAX_BATCH_FILES", "10"))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def api_token(self) -> str:
        """Get the remote image API token from Parameter Store."""
        try:
            from src.core.parameter_store import get_parameter
            return get_parameter(f"/image-upload-queue/{self.environment}/api-token", self.aws_region)
        except Exception as e:
            # Fallback for local dev or if parameter doesn't exist
            structlog.get_logger(__name__).warning("api_token_fallback", error=str(e))
            return self.image_api_token

    # Environment
    environment: str = os.getenv("ENVIRONMENT", "dev")

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
