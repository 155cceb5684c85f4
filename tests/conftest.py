# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Mocked SupabaseClient / StripeClient installed via dependency overrides
# - A TestClient with the lifespan run (admin console seeded)
# =============================================================================

import os
from unittest.mock import MagicMock
from uuid import UUID

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-for-hs256-signing")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_123")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_123")
os.environ.setdefault("STRIPE_PRICE_FOUNDING_MEMBER", "price_founding")
os.environ.setdefault("STRIPE_PRICE_BRONZE", "price_bronze")
os.environ.setdefault("STRIPE_PRICE_SILVER", "price_silver")
os.environ.setdefault("STRIPE_PRICE_GOLD", "price_gold")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from app.auth import get_current_admin
from app.auth.models import AuthUser
from app.config import Settings, get_settings
from app.dependencies import get_auth_client, get_stripe_client, get_supabase_client
from lib.stripe_client import StripeClient
from lib.supabase_client import SupabaseClient

ADMIN_ID = UUID("11111111-1111-1111-1111-111111111111")


# =============================================================================
# Settings
# =============================================================================

@pytest.fixture
def test_settings():
    """Settings with every provider key present."""
    return Settings(_env_file=None)


# =============================================================================
# Provider Mocks
# =============================================================================

@pytest.fixture
def mock_db():
    """SupabaseClient with every method mocked; nothing found by default."""
    db = MagicMock(spec=SupabaseClient)
    db.auth = MagicMock()
    db.find_auth_user_by_email.return_value = None
    db.fetch_active_subscription.return_value = None
    db.fetch_latest_assessment.return_value = None
    db.fetch_profile.return_value = None
    db.fetch_profile_by_email.return_value = None
    db.fetch_assessment.return_value = None
    db.fetch_membership_snapshot.return_value = None
    db.is_event_processed.return_value = False
    db.is_active_admin.return_value = False
    return db


@pytest.fixture
def mock_stripe():
    return MagicMock(spec=StripeClient)


@pytest.fixture
def sample_profile():
    return {
        "id": "profile-123",
        "email": "owner@acme.com",
        "full_name": "Jane Owner",
        "company_name": "Acme Restoration",
        "city": "Dallas",
        "state": "TX",
        "stripe_customer_id": None,
    }


@pytest.fixture
def sample_checkout_session():
    """A completed Checkout Session as returned by Stripe (as a dict)."""
    return {
        "id": "cs_test_123",
        "customer": "cus_123",
        "customer_details": {"email": "Owner@Acme.com"},
        "customer_email": None,
        "subscription": "sub_123",
        "payment_status": "paid",
        "success_url": "https://example.com/success/gold?checkout=success&session_id={CHECKOUT_SESSION_ID}",
        "metadata": {
            "email_entered": "owner@acme.com",
            "plan": "gold",
            "assessment_id": "assessment-1",
            "profile_id": "profile-123",
        },
    }


@pytest.fixture
def valid_assessment_payload():
    return {
        "full_name": "Jane Owner",
        "email": "Owner@Acme.com ",
        "state": "tx",
        "city": "Dallas",
        "answers": {"businessName": "Acme Restoration", "hasLicense": True},
        "operational_score": 15,
        "licensing_score": 10,
        "feedback_score": 25,
        "certifications_score": 15,
        "digital_score": 17,
        "total_score": 82,
        "grade": "A",
        "is_eligible": True,
        "eligibility_reasons": [],
        "scenario": "results-page",
        "intended_membership_tier": "Gold",
    }


# =============================================================================
# Application
# =============================================================================

@pytest.fixture
def app(test_settings, mock_db, mock_stripe):
    """The FastAPI app with providers replaced by mocks."""
    from app.main import app as fastapi_app

    fastapi_app.dependency_overrides[get_settings] = lambda: test_settings
    fastapi_app.dependency_overrides[get_supabase_client] = lambda: mock_db
    fastapi_app.dependency_overrides[get_auth_client] = lambda: mock_db
    fastapi_app.dependency_overrides[get_stripe_client] = lambda: mock_stripe
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """TestClient with the lifespan run, so app.state is populated."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_client(app, client):
    """TestClient authenticated as an active admin."""
    app.dependency_overrides[get_current_admin] = lambda: AuthUser(id=ADMIN_ID, email="max@restorationexpertise.com")
    return client


@pytest.fixture
def use_settings(app):
    """Swap the settings used by request handlers."""
    def apply(settings: Settings) -> None:
        app.dependency_overrides[get_settings] = lambda: settings
    return apply
