# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .assessment_service import AssessmentService
from .checkout_service import CheckoutService, resolve_base_url
from .eligibility_service import EligibilityService
from .identity_service import IdentityProvider, LoginError
from .login_flow import Cooldown, CooldownRegistry, LoginFlow, handle_checkout_return
from .stripe_session_service import SessionEmailNotFound, StripeSessionService
from .success_flow import SuccessFlow
from .webhook_service import WebhookService

__all__ = [
    "AssessmentService",
    "CheckoutService",
    "resolve_base_url",
    "EligibilityService",
    "IdentityProvider",
    "LoginError",
    "Cooldown",
    "CooldownRegistry",
    "LoginFlow",
    "handle_checkout_return",
    "SessionEmailNotFound",
    "StripeSessionService",
    "SuccessFlow",
    "WebhookService",
]
