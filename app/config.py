"""
Application configuration with Pydantic Settings for validation and type safety.
Supports environment-specific configurations and .env file loading.
"""

from enum import Enum
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Environment(str, Enum):
    """Application environment types"""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """
    Application settings with validation.
    Settings are loaded from environment variables or .env file.
    """

    # Application settings
    app_name: str = Field(default="MealLog", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: Environment = Field(
        default=Environment.DEVELOPMENT, description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode")

    # Server settings
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, ge=1, le=65535, description="Server port")

    # Database settings
    database_url: str = Field(
        default="postgresql+psycopg2://user@localhost:5432/meallog",
        description="SQLAlchemy connection URL",
    )
    db_echo: bool = Field(default=False, description="SQLAlchemy echo SQL statements")
    db_init_attempts: int = Field(
        default=8, ge=1, description="Database initialization retry attempts"
    )
    db_init_delay_sec: float = Field(
        default=2.0, ge=0, description="Delay between DB init attempts"
    )

    # Image storage
    public_root: str = Field(
        default="public", description="Directory served as the public web root"
    )
    upload_url_prefix: str = Field(
        default="/uploads/meals",
        description="Public URL prefix of stored meal images, relative to public_root",
    )
    upload_max_bytes: int = Field(
        default=10 * 1024 * 1024, ge=1, description="Maximum raw upload size"
    )
    upload_allowed_extensions: list[str] = Field(
        default=[".jpg", ".jpeg", ".png", ".webp"],
        description="Accepted upload filename extensions",
    )

    # Image transcoding
    image_max_width: int = Field(default=1920, ge=1, description="Max output width")
    image_max_height: int = Field(default=1080, ge=1, description="Max output height")
    image_max_size_bytes: int = Field(
        default=2 * 1024 * 1024, ge=1, description="Target size of a stored image"
    )
    image_initial_quality: int = Field(
        default=90, ge=1, le=100, description="First JPEG quality tried"
    )
    image_quality_floor: int = Field(
        default=10, ge=1, le=100, description="Lowest JPEG quality tried"
    )
    image_quality_step: int = Field(
        default=10, ge=1, description="Quality decrement per attempt"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="Log format string",
    )

    # CORS settings
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        description="Allowed CORS origins",
    )
    cors_allow_credentials: bool = Field(
        default=True, description="Allow CORS credentials"
    )
    cors_allow_methods: list[str] = Field(
        default=["*"], description="Allowed HTTP methods"
    )
    cors_allow_headers: list[str] = Field(
        default=["*"], description="Allowed HTTP headers"
    )

    # API settings
    api_prefix: str = Field(default="", description="API route prefix")
    api_title: str = Field(default="MealLog API", description="API documentation title")
    api_description: str = Field(
        default="Meal logging with photo uploads and shared feeds",
        description="API documentation description",
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        """Validate and normalize environment value"""
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @field_validator("upload_url_prefix")
    @classmethod
    def validate_upload_url_prefix(cls, v: str) -> str:
        """Store the prefix as '/a/b' with no trailing slash"""
        cleaned = v.strip().strip("/")
        if not cleaned:
            raise ValueError("upload_url_prefix must not be empty")
        return f"/{cleaned}"

    @field_validator("upload_allowed_extensions")
    @classmethod
    def validate_upload_allowed_extensions(cls, v: list[str]) -> list[str]:
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in v]

    @property
    def upload_root(self) -> Path:
        """Directory that holds the files behind upload_url_prefix"""
        return Path(self.public_root) / self.upload_url_prefix.lstrip("/")

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.environment == Environment.PRODUCTION

    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.environment == Environment.DEVELOPMENT

    def is_testing(self) -> bool:
        """Check if running in testing environment"""
        return self.environment == Environment.TESTING


# Global settings instance
settings = Settings()
