# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import get_settings
#   settings = get_settings()
#   print(settings.STRIPE_SECRET_KEY)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Provider keys are optional at load time. Endpoints declare the keys they
# need (see app.dependencies.require_env) and fail closed when one is absent.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Plan slug -> environment variable holding its Stripe price id
PLAN_PRICE_ENV: dict[str, str] = {
    "founding-member": "STRIPE_PRICE_FOUNDING_MEMBER",
    "bronze": "STRIPE_PRICE_BRONZE",
    "silver": "STRIPE_PRICE_SILVER",
    "gold": "STRIPE_PRICE_GOLD",
}

# Deployment URL variables tried, in order, when the request has no origin
BASE_URL_ENV_CHAIN: tuple[str, ...] = ("DEPLOY_URL", "DEPLOY_PRIME_URL", "URL", "SITE_URL")


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    Access through get_settings() so FastAPI dependencies can be overridden
    in tests.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------

    SUPABASE_URL: str | None = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str | None = Field(
        default=None,
        description="Supabase anon/public API key (used for auth flows)"
    )

    SUPABASE_SERVICE_ROLE_KEY: str | None = Field(
        default=None,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str | None = Field(
        default=None,
        description="Legacy HS256 secret used to verify Supabase access tokens"
    )

    # -------------------------------------------------------------------------
    # Stripe Configuration
    # -------------------------------------------------------------------------

    STRIPE_SECRET_KEY: str | None = Field(
        default=None,
        description="Stripe secret API key"
    )

    STRIPE_WEBHOOK_SECRET: str | None = Field(
        default=None,
        description="Signing secret for the Stripe webhook endpoint"
    )

    STRIPE_PRICE_FOUNDING_MEMBER: str | None = Field(default=None, description="Price id for the founding-member plan")
    STRIPE_PRICE_BRONZE: str | None = Field(default=None, description="Price id for the bronze plan")
    STRIPE_PRICE_SILVER: str | None = Field(default=None, description="Price id for the silver plan")
    STRIPE_PRICE_GOLD: str | None = Field(default=None, description="Price id for the gold plan")

    # -------------------------------------------------------------------------
    # Deployment Context
    # -------------------------------------------------------------------------
    # Used only as a fallback when the request carries no usable origin

    DEPLOY_URL: str | None = Field(default=None, description="URL of this specific deploy")
    DEPLOY_PRIME_URL: str | None = Field(default=None, description="URL of the branch deploy")
    URL: str | None = Field(default=None, description="Primary site URL")
    SITE_URL: str | None = Field(default=None, description="Explicit site URL override")

    CONTEXT: str = Field(
        default="unknown",
        description="Deploy context name (production, deploy-preview, ...)"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:5173",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Login Links & Preferences
    # -------------------------------------------------------------------------

    MAGIC_LINK_COOLDOWN_SECONDS: int = Field(
        default=60,
        ge=0,
        le=3600,
        description="Seconds a visitor must wait before re-sending a login link"
    )

    PREFERENCE_TTL_DAYS: int = Field(
        default=30,
        ge=1,
        le=365,
        description="How long the last plan/email preferences are kept"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        # Load from .env file in project root
        env_file=".env",
        env_file_encoding="utf-8",
        # Treat empty values as unset so blank keys count as missing
        env_ignore_empty=True,
        # Case-sensitive environment variable names
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:5173, https://restorationexpertise.com"
            -> ["http://localhost:5173", "https://restorationexpertise.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    def missing(self, *keys: str) -> list[str]:
        """
        List the given configuration keys that are unset or blank.

        Args:
            keys: Setting names, e.g. "STRIPE_SECRET_KEY"

        Returns:
            The subset of keys with no usable value, in the order given
        """
        absent = []
        for key in keys:
            value = getattr(self, key, None)
            if value is None or (isinstance(value, str) and not value.strip()):
                absent.append(key)
        return absent

    def price_for_plan(self, plan: str) -> str | None:
        """Return the configured Stripe price id for a plan slug, if any."""
        env_name = PLAN_PRICE_ENV.get(plan)
        if env_name is None:
            return None
        value = getattr(self, env_name)
        return value.strip() if value and value.strip() else None


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for module-level setup (logging, CORS)
settings = get_settings()
