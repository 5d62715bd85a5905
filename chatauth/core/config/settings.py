"""Main application settings and configuration management.

This module composes all the application settings from the different modules
(app, database, auth, oauth) into a single, accessible `Settings` class.

It loads settings from environment variables and .env files, validates them,
and provides a single `settings` object for use throughout the application.

Environment Support:
- Development: Uses .env, debug mode on, ephemeral provider-token encryption key allowed
- Test: Uses .env.test
- Staging: Uses .env.staging, TOKEN_ENCRYPTION_KEY required
- Production: Uses .env.production, TOKEN_ENCRYPTION_KEY required
"""

import logging
import os
from pathlib import Path

from pydantic_settings import SettingsConfigDict

from .app import AppSettings
from .auth import AuthSettings
from .database import DatabaseSettings
from .oauth import OAuthSettings

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)
logging.getLogger("passlib").setLevel(logging.ERROR)


class Settings(AppSettings, DatabaseSettings, AuthSettings, OAuthSettings):
    """The main settings class that aggregates all application configurations.

    It inherits from all the specialized settings classes, providing a unified
    interface to all configuration parameters.

    Security Note:
        - Ensure all sensitive fields (JWT secrets, client secrets, database
          password, encryption key) are securely stored and never logged.
    Usage:
        - Access settings via the singleton instance `settings` throughout the application.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="allow"
    )

    def __init__(self, **kwargs):
        """Initialize settings with environment-specific configuration."""
        super().__init__(**kwargs)
        self._set_environment_defaults(self.APP_ENV)

    def _set_environment_defaults(self, env: str) -> None:
        """Set environment-specific default values.

        Args:
            env: Environment name
        """
        if env == "development":
            self.DEBUG = True
            self.AUTH_COOKIE_SECURE = False
            self.LOG_JSON = False
            logger.info("Debug mode enabled for development environment")

        logger.info(f"Application running in {env} environment")

    def validate_required_fields(self) -> None:
        """Validates that the OAuth client registrations are complete.

        Missing provider credentials only disable the corresponding login
        flow, so they are reported instead of failing startup, except in
        production where they are treated as a misconfiguration.

        Raises:
            ValueError: If provider credentials are missing in production.
        """
        required_fields = [
            "GOOGLE_CLIENT_ID",
            "GOOGLE_CLIENT_SECRET",
            "FACEBOOK_APP_ID",
            "FACEBOOK_APP_SECRET",
        ]

        missing_fields = []
        for field in required_fields:
            value = getattr(self, field, None)
            if hasattr(value, "get_secret_value"):
                value = value.get_secret_value()
            if not value:
                missing_fields.append(field)

        if missing_fields:
            error_msg = f"Missing OAuth environment variables: {', '.join(missing_fields)}"
            if self.APP_ENV == "production":
                logger.error(error_msg)
                raise ValueError(error_msg)
            logger.warning(error_msg)
        else:
            logger.info("All OAuth environment variables are set.")


def create_settings() -> Settings:
    """Create settings instance with environment-specific configuration.

    Returns:
        Settings: Configured settings instance
    """
    env = os.getenv("APP_ENV", "development")

    env_files = {
        "development": ".env",
        "test": ".env.test",
        "staging": ".env.staging",
        "production": ".env.production",
    }

    env_file = env_files.get(env, ".env")

    if env != "development" and Path(env_file).exists():
        logger.info(f"Loading environment configuration from {env_file}")
        settings_instance = Settings(_env_file=env_file)
    elif Path(".env").exists():
        logger.info(f"Loading environment configuration from .env (environment: {env})")
        settings_instance = Settings()
    else:
        logger.warning(f"No .env file found, using environment variables only (environment: {env})")
        settings_instance = Settings()

    return settings_instance


# Create a singleton instance of the settings to be used across the application.
settings = create_settings()
settings.validate_required_fields()
