# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Restoration Expertise Membership API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.auth import routes as auth_routes
from app.config import settings
from app.exceptions import (
    MembershipException,
    http_exception_handler,
    membership_exception_handler,
    validation_exception_handler,
)
from app.routers import admin, assessments, checkout, eligibility, health, pages, stripe_session, webhooks
from core.admin import AdminConsole
from core.services.login_flow import CooldownRegistry

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs on startup and shutdown:
    - Startup: seed the admin repositories, create the login-link cooldowns
    - Shutdown: log only; in-memory state is discarded
    """
    logger.info(f"Starting Restoration Expertise API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    missing = settings.missing(
        "SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY", "SUPABASE_ANON_KEY", "STRIPE_SECRET_KEY"
    )
    if missing:
        logger.warning(f"Starting with missing configuration, affected endpoints will fail closed: {missing}")

    app.state.admin_console = AdminConsole.seeded()
    app.state.cooldowns = CooldownRegistry(settings.MAGIC_LINK_COOLDOWN_SECONDS)

    yield

    logger.info("Shutting down Restoration Expertise API")


# Create FastAPI application
app = FastAPI(
    title="Restoration Expertise Membership API",
    description="""
## Membership, Checkout & Admin API

Backs the Restoration Expertise membership site: assessments, Stripe
Checkout, passwordless member login and the admin back office.

### Buyer Flow

1. **Check Email** - `POST /api/v1/check-email-eligibility`
2. **Save Assessment** - `POST /api/v1/save-assessment`
3. **Checkout** - `POST /api/v1/create-checkout-session` returns a Stripe URL
4. **Land** - `GET /api/v1/success/{plan}?session_id=...` sends the login link

### Quick Start

```bash
curl -X POST http://localhost:8000/api/v1/create-checkout-session \\
  -H "Content-Type: application/json" \\
  -d '{"email": "owner@acme.com", "plan": "gold"}'
```
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Login links, admin sign-in and token checks"},
        {"name": "Assessments", "description": "Eligibility, scoring and saving assessments"},
        {"name": "Checkout", "description": "Stripe Checkout sessions and session lookups"},
        {"name": "Webhooks", "description": "Stripe event processing"},
        {"name": "Pages", "description": "Login and post-payment page models"},
        {"name": "Admin", "description": "Admin console back office"},
        {"name": "Health", "description": "API health and configuration checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

@app.middleware("http")
async def options_short_circuit(request: Request, call_next):
    """Answer OPTIONS on any path with 200 and no business logic."""
    if request.method == "OPTIONS":
        return JSONResponse(status_code=200, content={"ok": True})
    return await call_next(request)


# CORS middleware - allows cross-origin requests (wraps the OPTIONS handler,
# so browser preflights still get CORS headers)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(MembershipException)
async def handle_membership_exception(request: Request, exc: MembershipException):
    """Handle application exceptions (config, validation, upstream, ...)."""
    return await membership_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    return await validation_exception_handler(request, exc)


@app.exception_handler(StarletteHTTPException)
async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    return await http_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Authentication endpoints
app.include_router(
    auth_routes.router,
    prefix="/api/v1",
    tags=["Auth"]
)

# Health and configuration checks
app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)

# Eligibility and assessment endpoints
app.include_router(
    eligibility.router,
    prefix="/api/v1",
    tags=["Assessments"]
)
app.include_router(
    assessments.router,
    prefix="/api/v1",
    tags=["Assessments"]
)

# Checkout endpoints
app.include_router(
    checkout.router,
    prefix="/api/v1",
    tags=["Checkout"]
)
app.include_router(
    stripe_session.router,
    prefix="/api/v1",
    tags=["Checkout"]
)

# Stripe webhooks
app.include_router(
    webhooks.router,
    prefix="/api/v1",
    tags=["Webhooks"]
)

# Login and post-payment pages
app.include_router(
    pages.router,
    prefix="/api/v1",
    tags=["Pages"]
)

# Admin console
app.include_router(
    admin.router,
    prefix="/api/v1/admin",
    tags=["Admin"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Restoration Expertise Membership API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
