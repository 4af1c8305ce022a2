"""Website-biz configuration module.

This module provides centralized configuration management for the pipeline,
loading settings from environment variables with validation.

Configuration is loaded from:
1. .env file (if present)
2. Environment variables

API keys and credentials are only ever read from the environment. Pipeline
code receives a ``Config`` instance explicitly; the module-level ``config``
singleton is what the CLI and HTTP server hand out.

Usage:
    >>> from website_biz.config import config
    >>> config.has_remote_database()
    False
"""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigError

# Load environment variables from .env file
load_dotenv()

__all__ = ["Config", "ConfigError", "check_environment", "config", "parse_bool"]

# Keys the full scrape -> enrich -> generate -> send pipeline needs
REQUIRED_KEYS = [
    "GOOGLE_MAPS_API_KEY",
    "OPENAI_API_KEY",
    "SENDGRID_API_KEY",
    "SENDGRID_FROM_EMAIL",
]
OPTIONAL_KEYS = [
    "DATABASE_URL",
    "WORKER_TOKEN",
    "SITES_BASE_URL",
]

TRUE_VALUES = ["true", "1"]


def parse_bool(value) -> bool:
    """Interpret an env var, form field or JSON value as a flag.

    Strings count as true only when they are 'true' or '1' (any case), so
    'false' and '0' from query strings stay false.
    """
    if isinstance(value, str):
        return value.strip().lower() in TRUE_VALUES
    return bool(value)


class Config:
    """Application configuration loaded from environment variables.

    Attributes:
        DATA_DIR: Directory holding the local JSON backend and generated sites.
        DATABASE_URL: Remote backend connection string. Enables the remote
            backend when set.
        GOOGLE_MAPS_API_KEY: Google Maps Places API key for scraping.
        OPENAI_API_KEY: OpenAI key for the ``ai-premium`` site style.
        SENDGRID_API_KEY: SendGrid API key for outreach delivery.
        SENDGRID_FROM_EMAIL: Sender address for outreach.
        SEND_DAILY_LIMIT: Default number of emails the send stage may deliver
            per local calendar day.
        OUTREACH_RETRY_FAILED: Allow re-targeting addresses whose every prior
            attempt failed.
        WORKER_POLL_SECONDS: Idle poll interval of the worker loop.

    Example:
        >>> cfg = Config()
        >>> cfg.WORKER_POLL_SECONDS
        3.0
    """

    def __init__(self) -> None:
        """Initialize configuration by loading from environment variables."""
        self.logger = logging.getLogger(__name__)

        # Application environment
        self.APP_ENV = self._get_optional("APP_ENV", "dev")
        self.DEBUG = self._get_bool("DEBUG")
        self.LOG_LEVEL = self._get_optional("LOG_LEVEL", "INFO")

        # Local backend
        self.DATA_DIR = Path(
            self._get_optional("WEBSITE_BIZ_DATA_DIR", os.path.join(os.getcwd(), "website-biz"))
        )

        # Remote backend
        self.DATABASE_URL = self._get_optional("DATABASE_URL")
        self.DATABASE_POOL_SIZE = self._get_int("DATABASE_POOL_SIZE", 5)
        self.DATABASE_MAX_OVERFLOW = self._get_int("DATABASE_MAX_OVERFLOW", 10)

        # Google Maps (scrape)
        self.GOOGLE_MAPS_API_KEY = self._get_optional("GOOGLE_MAPS_API_KEY")
        self.SCRAPE_MAX_RESULTS = self._get_int("SCRAPE_MAX_RESULTS", 60)
        self.PLACES_TIMEOUT_SECONDS = self._get_float("PLACES_TIMEOUT_SECONDS", 20.0)
        self.PLACES_PAGE_DELAY_SECONDS = self._get_float("PLACES_PAGE_DELAY_SECONDS", 2.5)
        self.PLACES_DETAILS_DELAY_SECONDS = self._get_float(
            "PLACES_DETAILS_DELAY_SECONDS", 0.3
        )

        # Website fetching (enrich)
        self.HTTP_TIMEOUT_SECONDS = self._get_float("HTTP_TIMEOUT_SECONDS", 8.0)
        self.ENRICH_DELAY_SECONDS = self._get_float("ENRICH_DELAY_SECONDS", 0.3)

        # OpenAI (generate-site, ai-premium style)
        self.OPENAI_API_KEY = self._get_optional("OPENAI_API_KEY")
        self.OPENAI_MODEL = self._get_optional("OPENAI_MODEL", "gpt-4.1")
        self.OPENAI_TIMEOUT_SECONDS = self._get_float("OPENAI_TIMEOUT_SECONDS", 120.0)

        # Site output
        self.SITES_BASE_URL = self._get_optional("SITES_BASE_URL").rstrip("/")
        self.DEFAULT_TEMPLATE_STYLE = self._get_optional(
            "DEFAULT_TEMPLATE_STYLE", "neo-glass"
        )

        # SendGrid (send)
        self.SENDGRID_API_KEY = self._get_optional("SENDGRID_API_KEY")
        self.SENDGRID_FROM_EMAIL = self._get_optional("SENDGRID_FROM_EMAIL")
        self.SENDGRID_FROM_NAME = self._get_optional("SENDGRID_FROM_NAME")
        self.SEND_TIMEOUT_SECONDS = self._get_float("SEND_TIMEOUT_SECONDS", 30.0)
        self.SEND_DAILY_LIMIT = self._get_int("SEND_DAILY_LIMIT", 25)
        self.SENDER_NAME = self._get_optional("SENDER_NAME", "Founder")
        self.OUTREACH_RETRY_FAILED = self._get_bool("OUTREACH_RETRY_FAILED")

        # Daily runs
        self.DAILY_GENERATE_SITES = self._get_bool("DAILY_GENERATE_SITES")

        # Worker and API server
        self.WORKER_POLL_SECONDS = self._get_float("WORKER_POLL_SECONDS", 3.0)
        self.WORKER_TOKEN = self._get_optional("WORKER_TOKEN")
        self.API_HOST = self._get_optional("API_HOST", "0.0.0.0")
        self.API_PORT = self._get_int("API_PORT", 8787)

    def _get_required(self, name: str, default: Optional[str] = None) -> str:
        """Get a required configuration value from environment variables.

        Args:
            name: The name of the environment variable.
            default: Optional default value if not found.

        Returns:
            The value of the environment variable or default if provided.

        Raises:
            ConfigError: If the environment variable is not found and no default provided.
        """
        if name in os.environ:
            return os.environ[name]
        if default is not None:
            self.logger.warning(
                "Environment variable %s not found, using default value", name
            )
            return default
        raise ConfigError(
            f"Required environment variable {name} not found and no default provided"
        )

    def _get_optional(self, name: str, default: str = "") -> str:
        """Get an optional configuration value from environment variables.

        Args:
            name: The name of the environment variable.
            default: Default value if not found (default: "").

        Returns:
            The value of the environment variable or the default value.
        """
        if name in os.environ:
            return os.environ[name]
        return default

    def _get_bool(self, name: str) -> bool:
        """Get a boolean configuration value from environment variables.

        Args:
            name: The name of the environment variable.

        Returns:
            True if the environment variable exists and is set to 'true' or '1'.
        """
        return name in os.environ and parse_bool(os.environ[name])

    def _get_int(self, name: str, default: int) -> int:
        """Get an integer configuration value.

        Raises:
            ConfigError: If the value is not a valid integer.
        """
        raw = self._get_optional(name, str(default))
        try:
            return int(raw)
        except ValueError as e:
            raise ConfigError(f"{name} must be an integer, got {raw!r}") from e

    def _get_float(self, name: str, default: float) -> float:
        """Get a float configuration value.

        Raises:
            ConfigError: If the value is not a valid number.
        """
        raw = self._get_optional(name, str(default))
        try:
            return float(raw)
        except ValueError as e:
            raise ConfigError(f"{name} must be a number, got {raw!r}") from e

    def has_remote_database(self) -> bool:
        """Check whether the remote backend is configured.

        Returns:
            True if DATABASE_URL is set.
        """
        return bool(self.DATABASE_URL)

    def validate_for_scraping(self) -> None:
        """Validate configuration required for lead scraping.

        Raises:
            ConfigError: If required scraping configuration is missing.
        """
        if not self.GOOGLE_MAPS_API_KEY:
            raise ConfigError("GOOGLE_MAPS_API_KEY is required for lead scraping")

    def validate_for_generation(self) -> None:
        """Validate configuration required for AI site generation.

        Raises:
            ConfigError: If the OpenAI key is missing.
        """
        if not self.OPENAI_API_KEY:
            raise ConfigError("OPENAI_API_KEY is required for ai-premium site generation")

    def validate_for_email(self) -> None:
        """Validate configuration required for email delivery.

        Raises:
            ConfigError: If required email configuration is missing.
        """
        if not self.SENDGRID_API_KEY:
            raise ConfigError("SENDGRID_API_KEY is required for email delivery")
        if not self.SENDGRID_FROM_EMAIL:
            raise ConfigError("SENDGRID_FROM_EMAIL is required for email delivery")

    def validate_for_database(self) -> None:
        """Validate configuration required for the remote backend.

        Raises:
            ConfigError: If DATABASE_URL is missing.
        """
        if not self.DATABASE_URL:
            raise ConfigError("DATABASE_URL is required for database operations")

    def validate_all(self) -> None:
        """Validate all configuration needed for the full pipeline.

        Raises:
            ConfigError: If any required configuration is missing.
        """
        self.validate_for_scraping()
        self.validate_for_generation()
        self.validate_for_email()

    def get_database_connection_args(self) -> dict:
        """Get database connection arguments for SQLAlchemy.

        Returns:
            Dictionary of connection arguments.
        """
        return {
            "pool_size": self.DATABASE_POOL_SIZE,
            "max_overflow": self.DATABASE_MAX_OVERFLOW,
            "pool_pre_ping": True,
        }

    def is_production(self) -> bool:
        """Check if running in production environment.

        Returns:
            True if APP_ENV is 'prod' or 'production'.
        """
        return self.APP_ENV.lower() in ["prod", "production"]

    def is_development(self) -> bool:
        """Check if running in development environment.

        Returns:
            True if APP_ENV is 'dev' or 'development'.
        """
        return self.APP_ENV.lower() in ["dev", "development"]

    def get_log_level(self) -> int:
        """Get logging level as integer.

        Returns:
            Logging level constant (e.g., logging.INFO).
        """
        level_map = {
            "DEBUG": logging.DEBUG,
            "INFO": logging.INFO,
            "WARNING": logging.WARNING,
            "ERROR": logging.ERROR,
            "CRITICAL": logging.CRITICAL,
        }
        return level_map.get(self.LOG_LEVEL.upper(), logging.INFO)


def check_environment() -> dict:
    """Check which pipeline environment variables are present.

    Returns:
        Dictionary with ``ok`` (all required keys present), ``missing``
        (required keys not set) and ``optional`` (presence of optional keys).
    """
    missing = [name for name in REQUIRED_KEYS if not os.environ.get(name)]
    return {
        "ok": not missing,
        "missing": missing,
        "optional": {name: bool(os.environ.get(name)) for name in OPTIONAL_KEYS},
    }


# Create global singleton instance
config = Config()
