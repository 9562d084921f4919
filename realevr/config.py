"""
Configuration management using Pydantic settings.
Handles storage backend selection, upload limits, JWT secrets and payment gateway keys.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import Optional, List
from functools import lru_cache
from pathlib import Path


class Settings(BaseSettings):
    """Application settings read from the environment and an optional .env file."""

    # Application configuration
    app_name: str = "RealEVR Listings API"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 5000

    # Storage configuration. Without a database URL the JSON file store is used.
    database_url: Optional[str] = None
    data_file: str = "data.json"
    autosave_interval: float = 30.0
    seed_sample_data: bool = True
    db_connect_retries: int = 5
    db_connect_initial_delay: float = 1.0

    # File upload configuration
    upload_dir: str = "./uploads"
    max_image_size: int = 5 * 1024 * 1024  # 5MB
    max_tour_size: int = 5 * 1024 * 1024 * 1024  # 5GB
    upload_chunk_size: int = 1024 * 1024

    # JWT configuration
    jwt_secret_key: str = "your-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    # Flutterwave configuration
    flutterwave_secret_key: Optional[str] = None
    flutterwave_base_url: str = "https://api.flutterwave.com/v3"
    flutterwave_timeout: float = 30.0
    default_currency: str = "UGX"
    membership_duration_days: int = 30

    # Bootstrap admin account created at startup when missing
    admin_username: Optional[str] = None
    admin_password: Optional[str] = None

    # API configuration
    api_prefix: str = "/api"
    cors_origins: List[str] = ["http://localhost:5000", "http://localhost:5173"]
    client_dist_dir: Optional[str] = None

    @field_validator("database_url", mode="before")
    @classmethod
    def validate_database_url(cls, v):
        """Ensure an async driver is used for the configured database."""
        if not v:
            return None
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql+asyncpg://", 1)
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        if v.startswith("sqlite://"):
            return v.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return v

    @field_validator("jwt_secret_key", mode="before")
    @classmethod
    def validate_jwt_secret_key(cls, v):
        """Validate JWT secret key strength."""
        if not v:
            raise ValueError("JWT_SECRET_KEY is required")
        if len(v) < 32 and v != "your-secret-key-change-in-production":
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters long")
        return v

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment setting."""
        allowed_envs = ["development", "testing", "staging", "production"]
        if v not in allowed_envs:
            raise ValueError(f"Environment must be one of: {allowed_envs}")
        return v

    @field_validator("default_currency")
    @classmethod
    def validate_currency(cls, v):
        if len(v) != 3 or not v.isalpha():
            raise ValueError("Currency must be a 3-letter ISO code")
        return v.upper()

    @property
    def uses_database(self) -> bool:
        """Whether the relational backend is selected instead of the JSON file store."""
        return bool(self.database_url)

    @property
    def upload_path(self) -> Path:
        return Path(self.upload_dir)

    @property
    def image_upload_path(self) -> Path:
        return self.upload_path / "images"

    @property
    def tour_upload_path(self) -> Path:
        return self.upload_path / "tours"

    @property
    def incoming_upload_path(self) -> Path:
        """Uploads are staged here, outside the served directories, until they are validated."""
        return self.upload_path / ".incoming"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one instance of settings throughout the app lifecycle.
    """
    return Settings()


# Global settings instance
settings = get_settings()
