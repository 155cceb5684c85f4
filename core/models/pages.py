# =============================================================================
# core/models/pages.py - Page Flow Schemas
# =============================================================================
# Request and response shapes for the login and post-payment pages:
# - MagicLinkRequest / ResendRequest: ask for a login link
# - AdminLoginRequest / AdminLoginResponse: admin password sign-in
# - LoginPageState: result of arriving at /login (checkout return handling)
# - SuccessPage / SuccessFallback: composed post-payment page
# =============================================================================

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from core.models.assessment import clean_email
from core.models.plan import PlanDetails

SendStatus = Literal["idle", "sending", "sent", "error"]
LoginState = Literal["form", "confirming", "confirmed"]


class MagicLinkRequest(BaseModel):
    """Email to send a passwordless login link to."""
    email: str = Field(..., example="owner@acmerestoration.com")

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email_field(cls, value: Any) -> str:
        return clean_email(value)


class ResendRequest(MagicLinkRequest):
    """Re-send the login link from the post-payment page."""
    session_id: str | None = None


class MagicLinkResponse(BaseModel):
    status: SendStatus
    message: str
    cooldown_seconds: int = 0


class AdminLoginRequest(BaseModel):
    email: str = Field(..., example="admin@restorationexpertise.com")
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email_field(cls, value: Any) -> str:
        return clean_email(value)


class AdminLoginResponse(BaseModel):
    success: bool
    error: str | None = None
    access_token: str | None = None


class LoginPageState(BaseModel):
    """What the login page shows after a checkout redirect."""
    state: LoginState = "form"
    email: str | None = None
    redirect: str | None = None
    error: str | None = None


class SuccessPage(BaseModel):
    """
    Composed post-payment page.

    `redirect` is set when the plan came from the cached preference rather
    than the URL, so the client can move to the canonical /success/<plan>.
    """
    plan: str
    is_founding: bool
    details: PlanDetails
    email: str | None = None
    business_name: str = "Your Business"
    contact_name: str = "Your Name"
    status: SendStatus = "idle"
    message: str = ""
    cooldown_seconds: int = 0
    redirect: str | None = None
    title: str = "Welcome to the Biggest Restoration Community Homeowners Trust"


class SuccessFallback(BaseModel):
    """Minimal page returned when composing the success page fails."""
    fallback: bool = True
    message: str = "Your payment was successful. Check your email for your login link."
    debug: str | None = None
