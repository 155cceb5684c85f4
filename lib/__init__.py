# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Typed Supabase wrapper for database and auth calls
# - stripe_client.py: Thin Stripe wrapper (customers, Checkout, webhooks)
# - checkout_client.py: Client that starts a Checkout redirect
# - preferences.py: Last plan / email with expiry
# - scoring.py: Assessment scoring and grading
# - utils.py: Shared utilities (error handling, email normalization)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.stripe_client import StripeClient, StripeClientError, WebhookSignatureError
from lib.checkout_client import CheckoutError, CheckoutInitiator, CheckoutPreconditionError
from lib.preferences import PreferenceStore
from lib.scoring import ScoreBreakdown, calculate_score
from lib.utils import ApplicationError, is_valid_email, normalize_email

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Stripe
    "StripeClient",
    "StripeClientError",
    "WebhookSignatureError",
    # Checkout
    "CheckoutError",
    "CheckoutInitiator",
    "CheckoutPreconditionError",
    # Preferences
    "PreferenceStore",
    # Scoring
    "ScoreBreakdown",
    "calculate_score",
    # Utils
    "ApplicationError",
    "is_valid_email",
    "normalize_email",
]
