"""
Configuration management for the Profile Share backend.
Handles environment variables and application settings for profiles, sessions and uploads.
"""

from typing import Any, List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Profile Share Backend"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    SECRET_KEY: str = "your-secret-key-change-in-production"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # CORS
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:8000",
    ]
    ALLOWED_HOSTS: List[str] = [
        "localhost",
        "testserver",
    ]

    # Database - MongoDB
    MONGODB_URL: str = "mongodb://localhost:27017"
    MONGODB_DATABASE: str = "profile_share"
    MONGODB_USERNAME: Optional[str] = None
    MONGODB_PASSWORD: Optional[str] = None

    # MongoDB Environment Variables (from .env)
    MONGO_URI: Optional[str] = None
    MONGO_DB_NAME: Optional[str] = None

    # Redis for profile caching
    REDIS_URI: str = "redis://localhost:6379"
    REDIS_DB: int = 0
    PROFILE_CACHE_TTL_SECONDS: int = 300

    # Session tokens (signed JWT, sliding expiry)
    JWT_SECRET_KEY: str = "your-jwt-secret-key-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    SESSION_MAX_AGE_DAYS: int = 30
    SESSION_COOKIE_NAME: str = "session_token"

    # Auth pages the client is redirected to
    LOGIN_PATH: str = "/login"
    REGISTER_PATH: str = "/register"

    # Security
    BCRYPT_ROUNDS: int = 12
    PASSWORD_MIN_LENGTH: int = 8

    # Object storage (S3 compatible)
    S3_BUCKET_NAME: str = "profile-share-images"
    S3_REGION: str = "us-east-1"
    S3_ENDPOINT_URL: Optional[str] = None
    S3_ACCESS_KEY_ID: Optional[str] = None
    S3_SECRET_ACCESS_KEY: Optional[str] = None
    S3_PUBLIC_URL: Optional[str] = None
    UPLOAD_URL_EXPIRE_SECONDS: int = 60
    DEFAULT_AVATAR_URL: str = "/default-avatar.png"

    # Client (page controllers)
    API_BASE_URL: str = "http://localhost:8000/api/v1"
    CLIENT_TIMEOUT_SECONDS: float = 10.0

    # Logging
    LOG_LEVEL: str = "INFO"

    # Cookie Configuration
    COOKIE_DOMAIN: Optional[str] = None
    COOKIE_SAMESITE: str = "lax"  # "none", "lax", or "strict"
    COOKIE_SECURE: bool = True  # Must be True when samesite="none"
    COOKIE_HTTPONLY: bool = True
    COOKIE_PATH: str = "/"

    @property
    def SESSION_MAX_AGE_SECONDS(self) -> int:
        """Session lifetime in seconds."""
        return self.SESSION_MAX_AGE_DAYS * 24 * 60 * 60

    def get_effective_cors_origins(self) -> List[str]:
        """
        Get effective CORS origins based on environment.
        Ensures the local frontend ports are always present outside production.
        """
        origins = list(self.ALLOWED_ORIGINS)

        if self.ENVIRONMENT != "production":
            for port in [3000, 5173, 8000]:
                origin = f"http://localhost:{port}"
                if origin not in origins:
                    origins.append(origin)

        return origins

    def get_image_base_url(self) -> str:
        """Public base URL images are served from."""
        if self.S3_PUBLIC_URL:
            return self.S3_PUBLIC_URL.rstrip("/")
        if self.S3_ENDPOINT_URL:
            return f"{self.S3_ENDPOINT_URL.rstrip('/')}/{self.S3_BUCKET_NAME}"
        return f"https://{self.S3_BUCKET_NAME}.s3.{self.S3_REGION}.amazonaws.com"

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator("ALLOWED_HOSTS", mode="before")
    @classmethod
    def parse_allowed_hosts(cls, v):
        """Parse allowed hosts from string or list."""
        if isinstance(v, str):
            return [host.strip() for host in v.split(",")]
        return v

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment setting."""
        allowed_envs = ["development", "staging", "production"]
        if v not in allowed_envs:
            raise ValueError(f"Environment must be one of {allowed_envs}")
        return v

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

    def model_post_init(self, __context: Any) -> None:  # type: ignore[override]
        """Fall back to the application secret when no JWT secret is configured."""
        if not self.JWT_SECRET_KEY:
            self.JWT_SECRET_KEY = self.SECRET_KEY


# Create global settings instance
settings = Settings()


def get_mongodb_url() -> str:
    """
    Get MongoDB connection URL with authentication if credentials are provided.

    Returns:
        str: MongoDB connection URL
    """
    if settings.MONGO_URI:
        return settings.MONGO_URI

    if settings.MONGODB_USERNAME and settings.MONGODB_PASSWORD:
        base_url = settings.MONGODB_URL.replace("mongodb://", "")
        if "@" not in base_url:  # No existing auth in URL
            return f"mongodb://{settings.MONGODB_USERNAME}:{settings.MONGODB_PASSWORD}@{base_url}"

    return settings.MONGODB_URL


def get_mongodb_database_name() -> str:
    """
    Get MongoDB database name.

    Returns:
        str: MongoDB database name
    """
    if settings.MONGO_DB_NAME:
        return settings.MONGO_DB_NAME

    return settings.MONGODB_DATABASE

