# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
#
# Configuration gates come first: require_env(...) fails closed with
# MISSING_ENV before any provider client is built.
# =============================================================================

from typing import Annotated, Callable

from fastapi import Depends, Request, Response

from app.config import Settings, get_settings
from app.exceptions import ConfigurationError
from core.admin import AdminConsole
from core.services.login_flow import CooldownRegistry
from lib.preferences import EMAIL_STORAGE_KEY, PLAN_STORAGE_KEY, PreferenceStore
from lib.stripe_client import StripeClient
from lib.supabase_client import SupabaseClient

SettingsDep = Annotated[Settings, Depends(get_settings)]

SUPABASE_SERVICE_KEYS = ("SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY")
SUPABASE_AUTH_KEYS = ("SUPABASE_URL", "SUPABASE_ANON_KEY")


# -----------------------------------------------------------------------------
# Configuration Gates
# -----------------------------------------------------------------------------

def require_env(*keys: str) -> Callable[[Settings], None]:
    """
    Build a dependency that rejects the request when any key is unset.

    Usage:
        @router.post("/check", dependencies=[Depends(require_env("SUPABASE_URL"))])

    Raises:
        ConfigurationError: 500 MISSING_ENV listing the absent keys
    """
    def check(settings: SettingsDep) -> None:
        missing = settings.missing(*keys)
        if missing:
            raise ConfigurationError(missing)

    return check


# -----------------------------------------------------------------------------
# Provider Clients
# -----------------------------------------------------------------------------

def get_supabase_client(settings: SettingsDep) -> SupabaseClient:
    """
    Get the service-role Supabase client.

    One underlying client is shared per url/key for the process.
    """
    missing = settings.missing(*SUPABASE_SERVICE_KEYS)
    if missing:
        raise ConfigurationError(missing)
    return SupabaseClient.connect(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)


def get_auth_client(settings: SettingsDep) -> SupabaseClient:
    """
    Get a fresh anon-key Supabase client for sign-in flows.

    Not shared, since signing in stores the session on the client.
    """
    missing = settings.missing(*SUPABASE_AUTH_KEYS)
    if missing:
        raise ConfigurationError(missing)
    return SupabaseClient.connect(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY, cached=False)


def get_stripe_client(settings: SettingsDep) -> StripeClient:
    missing = settings.missing("STRIPE_SECRET_KEY")
    if missing:
        raise ConfigurationError(missing)
    return StripeClient(settings.STRIPE_SECRET_KEY)


# -----------------------------------------------------------------------------
# Process State
# -----------------------------------------------------------------------------

def get_admin_console(request: Request) -> AdminConsole:
    """The seeded admin services created at startup."""
    return request.app.state.admin_console


def get_cooldowns(request: Request) -> CooldownRegistry:
    """Login-link cooldowns shared by every request for the same email."""
    return request.app.state.cooldowns


def get_preferences(request: Request, settings: SettingsDep) -> PreferenceStore:
    """
    Preference store for this visitor, seeded from their cookies.

    Handlers that change a preference write it back with set_preference_cookies.
    """
    initial = {
        key: request.cookies.get(key)
        for key in (PLAN_STORAGE_KEY, EMAIL_STORAGE_KEY)
        if request.cookies.get(key)
    }
    return PreferenceStore(ttl_seconds=settings.PREFERENCE_TTL_DAYS * 86400, initial=initial)


def set_preference_cookies(response: Response, preferences: PreferenceStore, settings: Settings) -> None:
    """Persist the visitor's current preferences as cookies with the store's TTL."""
    max_age = settings.PREFERENCE_TTL_DAYS * 86400
    for key in (PLAN_STORAGE_KEY, EMAIL_STORAGE_KEY):
        value = preferences.get(key)
        if value:
            response.set_cookie(key, value, max_age=max_age, httponly=True, samesite="lax")


# Type aliases for dependency injection
SupabaseDep = Annotated[SupabaseClient, Depends(get_supabase_client)]
AuthClientDep = Annotated[SupabaseClient, Depends(get_auth_client)]
StripeDep = Annotated[StripeClient, Depends(get_stripe_client)]
AdminConsoleDep = Annotated[AdminConsole, Depends(get_admin_console)]
CooldownsDep = Annotated[CooldownRegistry, Depends(get_cooldowns)]
PreferencesDep = Annotated[PreferenceStore, Depends(get_preferences)]
