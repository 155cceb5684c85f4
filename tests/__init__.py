# =============================================================================
# tests/ - Test Suite
# =============================================================================
# - Service and model tests run without HTTP (test_scoring, test_admin, ...)
# - Endpoint tests use the FastAPI TestClient with mocked Supabase and Stripe
#   clients from conftest.py (test_checkout, test_webhooks, test_pages, ...)
#
# Run tests with: pytest
# =============================================================================
