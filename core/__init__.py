# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains framework-agnostic business logic:
# - models/: Pydantic schemas for requests, responses and records
# - services/: Checkout, assessment, webhook and login/landing flows
# - admin/: In-memory admin console repositories and screen services
#
# Code in this package should NOT import from FastAPI.
# This keeps the logic testable and reusable.
# =============================================================================
