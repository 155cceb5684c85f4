# =============================================================================
# core/services/identity_service.py - Session / Identity Provider
# =============================================================================
# Tracks the Supabase auth session and the display-facing AppUser built from
# it:
# - start(): load the current session and follow session changes
# - login(email): send a passwordless login link
# - logout(): best-effort sign-out, always clears local state
# - update_user(user): replace the held AppUser
# - admin_login(email, password): password sign-in for active admins only
#
# Session-fetch and admin-lookup errors are logged and downgrade the user to
# "not an admin"; they never reach the caller.
# =============================================================================

import logging
from datetime import datetime
from typing import Any

from app.exceptions import LoginFailedError
from core.models.plan import PACKAGE_TIERS
from core.models.user import AccountInfo, AppUser, Role
from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)

MEMBER_NOT_FOUND_MESSAGE = "We couldn't find a member with that email. Please use the email you joined with."


class LoginError(LoginFailedError):
    """Raised when a login link could not be sent."""

    def __init__(self, message: str = MEMBER_NOT_FOUND_MESSAGE):
        super().__init__(message)


# =============================================================================
# AppUser synthesis
# =============================================================================

def format_renewal_date(value: str | None) -> str | None:
    """
    Format an ISO date for display ("Mar 15, 2025"); None if unparseable.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


def build_app_user(user: Any, role: Role, previous: AppUser | None = None) -> AppUser:
    """
    Synthesize an AppUser from an auth user.

    Fields of `previous` survive when it belongs to the same email, so edits
    made in the member area are not lost on a session refresh.

    Args:
        user: Auth user with id, email and user_metadata attributes
        role: "admin" or "member"
        previous: The AppUser currently held, if any
    """
    email = getattr(user, "email", None) or ""
    metadata = getattr(user, "user_metadata", None) or {}
    display_name = metadata.get("full_name") or email or "Member"

    existing = previous if previous is not None and previous.email == email else None

    if existing is not None:
        return existing.model_copy(update={"name": display_name, "role": role})

    return AppUser(
        id=str(getattr(user, "id", "")),
        name=display_name,
        email=email,
        role=role,
        account=AccountInfo(
            owner_name=display_name,
            owner_email=email,
            role="Administrator" if role == "admin" else "Owner",
        ),
    )


def apply_membership_snapshot(user: AppUser, snapshot: dict[str, Any] | None) -> AppUser:
    """
    Refresh plan name and renewal date from the profile's membership columns.

    Unknown tier names keep the current plan name; an unparseable billing
    date keeps the current renewal date.
    """
    if not snapshot:
        return user
    tier = snapshot.get("membership_tier")
    billing_date = snapshot.get("next_billing_date")
    if not tier and not billing_date:
        return user

    name = tier if tier in PACKAGE_TIERS else user.plan.name
    renewal = format_renewal_date(billing_date) or user.plan.renewal_date

    return user.model_copy(update={
        "package": name,
        "plan": user.plan.model_copy(update={"name": name, "renewal_date": renewal}),
    })


# =============================================================================
# Identity Provider
# =============================================================================

class IdentityProvider:
    """
    Holds the auth session, admin flag and AppUser for one client.

    Example:
        provider = IdentityProvider(SupabaseClient.connect(url, anon_key, cached=False))
        provider.start()
        provider.login("owner@acme.com")
        ...
        provider.close()
    """

    def __init__(self, database: SupabaseClient, redirect_origin: str | None = None):
        self.db = database
        self.redirect_origin = (redirect_origin or "").rstrip("/")
        self.session: Any = None
        self.user: Any = None
        self.is_admin = False
        self.loading = True
        self.current_user: AppUser | None = None
        self._subscription: Any = None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Load the current session and subscribe to session changes."""
        try:
            session = self.db.auth.get_session()
        except Exception as e:
            logger.error(f"Failed to fetch auth session: {e}")
            session = None

        self._subscription = self.db.auth.on_auth_state_change(self._on_auth_state_change)
        self.apply_session(session)

    def close(self) -> None:
        """Stop following session changes."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _on_auth_state_change(self, event: str, session: Any) -> None:
        logger.debug(f"Auth state change: {event}")
        self.apply_session(session)

    def apply_session(self, session: Any) -> None:
        """Re-derive admin flag and AppUser for a new session (or none)."""
        self.session = session
        self.user = getattr(session, "user", None) if session is not None else None

        if self.user is None:
            self.current_user = None
            self.is_admin = False
            self.loading = False
            return

        self.loading = True
        self.current_user, self.is_admin = self.resolve_user(self.user, self.current_user)
        self.loading = False

    def resolve_user(self, user: Any, previous: AppUser | None = None) -> tuple[AppUser, bool]:
        """
        Build the AppUser for an auth user and determine admin status.

        Returns:
            (AppUser, is_admin)
        """
        user_id = str(getattr(user, "id", ""))
        try:
            admin = self.db.is_active_admin(user_id)
        except SupabaseClientError as e:
            logger.error(f"Failed to determine admin status for {user_id}: {e}")
            return build_app_user(user, "member", previous), False

        try:
            snapshot = self.db.fetch_membership_snapshot(user_id)
        except SupabaseClientError as e:
            logger.error(f"Failed to load profile membership data for {user_id}: {e}")
            snapshot = None

        app_user = build_app_user(user, "admin" if admin else "member", previous)
        return apply_membership_snapshot(app_user, snapshot), admin

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def login(self, email: str) -> None:
        """
        Send a passwordless login link to an existing member.

        Raises:
            LoginError: With a member-facing message; provider details are logged only
        """
        options: dict[str, Any] = {"should_create_user": False}
        if self.redirect_origin:
            options["email_redirect_to"] = f"{self.redirect_origin}/member/dashboard"

        try:
            self.db.auth.sign_in_with_otp({"email": email.strip(), "options": options})
        except Exception as e:
            logger.warning(f"Magic link request failed for {email}: {e}")
            raise LoginError()

        logger.info(f"Sent magic link to {email}")

    def logout(self) -> None:
        """Sign out; provider errors are logged and local state is cleared regardless."""
        try:
            self.db.auth.sign_out()
        except Exception as e:
            logger.error(f"Failed to sign out: {e}")

        self.session = None
        self.user = None
        self.is_admin = False
        self.loading = False
        self.current_user = None

    def update_user(self, user: AppUser) -> None:
        self.current_user = user

    def admin_login(self, email: str, password: str) -> dict[str, Any]:
        """
        Password sign-in restricted to active admins.

        Returns:
            {"success": True} or {"success": False, "error": <message>}
        """
        try:
            try:
                response = self.db.auth.sign_in_with_password({"email": email, "password": password})
            except Exception as e:
                logger.info(f"Admin sign-in rejected for {email}: {e}")
                return {"success": False, "error": "Invalid email or password"}

            user = getattr(response, "user", None)
            if user is None:
                return {"success": False, "error": "Invalid email or password"}

            try:
                admin = self.db.is_active_admin(str(user.id))
            except SupabaseClientError as e:
                logger.error(f"Admin verification failed for {email}: {e}")
                self.logout()
                return {"success": False, "error": "Access verification failed"}

            if not admin:
                self.logout()
                return {"success": False, "error": "Access denied. You do not have admin privileges."}

            self.apply_session(getattr(response, "session", None))
            return {"success": True}

        except Exception:
            logger.exception("Admin login error")
            return {"success": False, "error": "An unexpected error occurred"}
