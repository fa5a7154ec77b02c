"""
Centralized configuration management for the Job Tracker application.
All environment variables and configuration settings are managed here.
"""
import secrets
from typing import Optional, List
from pydantic import field_validator
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings with validation and type hints."""

    # =============================================================================
    # APPLICATION SETTINGS
    # =============================================================================
    app_name: str = "Job Tracker"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False
    testing: bool = False

    # =============================================================================
    # SECURITY SETTINGS
    # =============================================================================
    secret_key: str = secrets.token_urlsafe(32)
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 7 * 24 * 60  # 7 days

    # bcrypt cost factor (pycryptodome accepts 4..31)
    password_hash_rounds: int = 12

    @field_validator('password_hash_rounds')
    @classmethod
    def validate_password_hash_rounds(cls, v):
        if not 4 <= v <= 31:
            raise ValueError('Password hash rounds must be between 4 and 31')
        return v

    # Browser session cookie carrying the access token
    session_cookie_name: str = "job_tracker_session"
    session_cookie_secure: bool = False

    # =============================================================================
    # DATABASE SETTINGS
    # =============================================================================
    database_url: str = "sqlite:///./job_tracker.db"
    database_echo: bool = False

    # =============================================================================
    # LOGGING SETTINGS
    # =============================================================================
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # =============================================================================
    # UI SETTINGS
    # =============================================================================
    # How long a closed detail popup keeps showing its record
    detail_close_delay_ms: int = 300

    # =============================================================================
    # DEVELOPMENT SETTINGS
    # =============================================================================
    api_docs_enabled: bool = True
    cors_enabled: bool = False
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # =============================================================================
    # CONFIGURATION LOADING
    # =============================================================================
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"

    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.testing or self.environment.lower() == "testing"

    def validate_required_settings(self) -> List[str]:
        """Validate that all required settings are properly configured."""
        missing = []

        if self.is_production():
            if not self.secret_key or len(self.secret_key) < 32:
                missing.append("SECRET_KEY must be at least 32 characters in production")

            if self.debug:
                missing.append("DEBUG must be False in production")

            if not self.session_cookie_secure:
                missing.append("SESSION_COOKIE_SECURE must be True in production")

        if self.log_level.upper() not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            missing.append(f"Invalid LOG_LEVEL: {self.log_level}")

        if self.detail_close_delay_ms < 0:
            missing.append("DETAIL_CLOSE_DELAY_MS cannot be negative")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).
    This function is cached to avoid recreating the settings object multiple times.
    """
    return Settings()
