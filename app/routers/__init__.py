# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health and environment check endpoints
# - eligibility.py: Email eligibility check
# - assessments.py: Save and score assessments
# - checkout.py: Stripe Checkout session creation
# - stripe_session.py: Checkout Session lookups for the landing page
# - webhooks.py: Stripe webhook receiver
# - pages.py: Login and post-payment page models
# - admin.py: Admin console back office
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import eligibility
from . import assessments
from . import checkout
from . import stripe_session
from . import webhooks
from . import pages
from . import admin

__all__ = [
    "health",
    "eligibility",
    "assessments",
    "checkout",
    "stripe_session",
    "webhooks",
    "pages",
    "admin",
]
