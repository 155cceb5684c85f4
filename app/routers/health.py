# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and deploy diagnostics.
# Environment checks report which keys are present, never their values.
# =============================================================================

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import BASE_URL_ENV_CHAIN, PLAN_PRICE_ENV
from app.dependencies import SUPABASE_SERVICE_KEYS, SettingsDep, get_supabase_client

router = APIRouter()

# Keys reported by /env-check
CHECKED_KEYS: tuple[str, ...] = (
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "SUPABASE_SERVICE_ROLE_KEY",
    "SUPABASE_JWT_SECRET",
    "STRIPE_SECRET_KEY",
    "STRIPE_WEBHOOK_SECRET",
    *PLAN_PRICE_ENV.values(),
)


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    environment: str
    version: str


class EnvCheckResponse(BaseModel):
    """Which configuration keys are set, plus the deploy context."""
    ok: bool
    present: list[str]
    missing: list[str]
    context: dict[str, str | None]


class ChecksResponse(BaseModel):
    """Individual provider checks."""
    database: str
    stripe: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""
    status: str
    checks: ChecksResponse
    timestamp: str


class CheckoutHealthResponse(BaseModel):
    context: str
    has_secret: bool
    has_price_founding_member: bool
    has_webhook: bool


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check(settings: SettingsDep):
    """
    Health check endpoint.

    Returns basic health status for load balancers and monitoring.
    """
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        environment=settings.ENVIRONMENT,
        version="1.0.0",
    )


@router.get("/env-check", response_model=EnvCheckResponse)
async def env_check(settings: SettingsDep):
    """Report present and missing configuration keys (names only)."""
    missing = settings.missing(*CHECKED_KEYS)
    present = [key for key in CHECKED_KEYS if key not in missing]

    context = {"CONTEXT": settings.CONTEXT}
    for key in BASE_URL_ENV_CHAIN:
        context[key] = getattr(settings, key)

    return EnvCheckResponse(ok=not missing, present=present, missing=missing, context=context)


@router.get("/checkout-health", response_model=CheckoutHealthResponse)
async def checkout_health(settings: SettingsDep):
    """Quick check that checkout can run in this deploy."""
    return CheckoutHealthResponse(
        context=settings.CONTEXT,
        has_secret=not settings.missing("STRIPE_SECRET_KEY"),
        has_price_founding_member=settings.price_for_plan("founding-member") is not None,
        has_webhook=not settings.missing("STRIPE_WEBHOOK_SECRET"),
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(settings: SettingsDep):
    """
    Readiness check endpoint.

    Runs a trivial profiles query and confirms Stripe is configured.
    """
    checks = ChecksResponse(database="unknown", stripe="unknown")

    # Check database
    if settings.missing(*SUPABASE_SERVICE_KEYS):
        checks.database = "not configured"
    else:
        try:
            get_supabase_client(settings).ping()
            checks.database = "healthy"
        except Exception as e:
            checks.database = f"unhealthy: {str(e)[:50]}"

    # Stripe is only checked for configuration; no API call is made
    checks.stripe = "not configured" if settings.missing("STRIPE_SECRET_KEY") else "configured"

    all_ready = checks.database == "healthy" and checks.stripe == "configured"

    return ReadinessResponse(
        status="ready" if all_ready else "degraded",
        checks=checks,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
