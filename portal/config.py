"""
Portal Configuration Module

Centralized configuration management with Pydantic validation.
All environment variables are validated at startup to catch misconfigurations early.
"""

import logging
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


class PortalSettings(BaseSettings):
    """
    Job portal configuration with validation.

    All settings can be overridden via environment variables
    (MONGODB_URI, MONGO_DB_NAME, FLASK_SECRET_KEY, ENVIRONMENT, ...).
    """

    # === MongoDB ===
    mongodb_uri: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI"
    )
    mongo_db_name: str = Field(
        default="job_portal",
        description="MongoDB database name"
    )
    resume_bucket: str = Field(
        default="resumes",
        description="GridFS bucket holding uploaded resumes"
    )

    # === Security ===
    flask_secret_key: Optional[str] = Field(
        default=None,
        description="Flask session signing key (required in production)"
    )
    environment: str = Field(
        default="development",
        description="Environment: development, staging, production"
    )

    # === Application form ===
    redirect_delay_seconds: int = Field(
        default=3,
        ge=0,
        le=60,
        description="Delay before the thank-you page returns to the job board"
    )
    max_resume_mb: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Maximum resume upload size in megabytes"
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is a known value."""
        allowed = {"development", "staging", "production", "testing"}
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"environment must be one of: {', '.join(sorted(allowed))}")
        return v_lower

    @field_validator("mongodb_uri")
    @classmethod
    def validate_mongodb_uri(cls, v: str) -> str:
        """Basic URI format validation."""
        if not v.startswith(("mongodb://", "mongodb+srv://")):
            raise ValueError(f"Invalid MongoDB URI format: {v}")
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    @property
    def max_resume_bytes(self) -> int:
        return self.max_resume_mb * 1024 * 1024

    def validate_production_config(self) -> List[str]:
        """
        Validate configuration is suitable for production.

        Returns list of warning/error messages.
        """
        issues = []

        if self.is_production:
            if not self.flask_secret_key:
                issues.append("CRITICAL: FLASK_SECRET_KEY required in production")
            if "localhost" in self.mongodb_uri:
                issues.append("WARNING: Using localhost MongoDB in production")

        return issues


@lru_cache()
def get_settings() -> PortalSettings:
    """
    Get cached settings instance.

    Settings are loaded once and cached. Call get_settings.cache_clear()
    after changing the environment (tests do this).
    """
    return PortalSettings()
