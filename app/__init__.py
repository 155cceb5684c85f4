# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# The HTTP surface of the membership API:
# - main.py: App entry point, middleware, exception handlers, router mounts
# - config.py: Settings loaded from the environment
# - dependencies.py: Configuration gates, provider clients, per-visitor state
# - auth/: Token validation, login links and admin sign-in
# - routers/: Checkout, assessment, webhook, page and admin endpoints
#
# Handlers stay thin and delegate to core/ services.
# =============================================================================
