# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application:
# - Email / string normalization shared by request models and services
# - UTC timestamp helpers
# - Base error class for lib/ modules
# =============================================================================

import re
from datetime import datetime, timedelta, timezone
from typing import Any


# Basic RFC-shaped email check used by every form that takes an email
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


# =============================================================================
# String Utilities
# =============================================================================

def normalize_email(value: str | None) -> str | None:
    """
    Trim and lower-case an email address.

    Args:
        value: Raw email as typed

    Returns:
        The normalized email, or None for empty input

    Example:
        normalize_email("  Owner@Acme.com ")  # "owner@acme.com"
    """
    if value is None:
        return None
    cleaned = value.strip().lower()
    return cleaned or None


def is_valid_email(value: str | None) -> bool:
    """Check an email against the basic pattern."""
    return bool(value) and EMAIL_PATTERN.match(value) is not None


def normalize_text(value: Any) -> str | None:
    """Trim a string value; blanks and non-strings become None."""
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    return cleaned or None


# =============================================================================
# Time Utilities
# =============================================================================

def utc_now() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


def iso_days_ago(days: int, now: datetime | None = None) -> str:
    """
    ISO-8601 timestamp for `days` days before now.

    Example:
        iso_days_ago(30)  # "2024-06-15T10:30:00+00:00"
    """
    return ((now or utc_now()) - timedelta(days=days)).isoformat()


def from_unix(timestamp: int | None) -> str | None:
    """Convert a Unix timestamp (as Stripe sends them) to ISO-8601."""
    if timestamp is None:
        return None
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


# =============================================================================
# Base Error Class
# =============================================================================

class ApplicationError(Exception):
    """
    Base error class for application-specific errors.

    Attributes:
        code: Error code for categorization
        message: Human-readable error message
        suggestion: Actionable suggestion for fixing the error
        details: Additional context for debugging

    Example:
        class CheckoutError(ApplicationError):
            def __init__(self, message: str, **kwargs):
                super().__init__(message, code="CHECKOUT_ERROR", **kwargs)
    """

    def __init__(
        self,
        message: str,
        code: str = "APPLICATION_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f"\n  Suggestion: {self.suggestion}"
        return result
