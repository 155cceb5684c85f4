# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database and auth
# operations used by the membership funnel:
# - Profiles (find by id/email, insert, update, upsert)
# - Assessments (recent lookup, insert, backfill)
# - Subscriptions, memberships and invoices (webhook bookkeeping)
# - Auth users (case-insensitive lookup, admin creation, admin flag)
#
# Instances are created per configuration and injected into handlers via
# app.dependencies, so tests can substitute a MagicMock.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   db = SupabaseClient.connect(url, service_role_key)
#   profile = db.fetch_profile_by_email("owner@example.com")
# =============================================================================

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from supabase import create_client, Client

# Set up logging for this module
logger = logging.getLogger(__name__)

# Page size used when scanning auth users
AUTH_USERS_PAGE_SIZE = 200


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Carries a code and a suggestion so callers can log something actionable
    before collapsing it to an API error code.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


@lru_cache(maxsize=8)
def _create_cached_client(url: str, key: str) -> Client:
    """Create one underlying client per (url, key) pair for the process."""
    return create_client(url, key)


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Example:
        db = SupabaseClient.connect(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
        user = db.find_auth_user_by_email("owner@acme.com")
        sub = db.fetch_active_subscription(user["id"]) if user else None
    """

    def __init__(self, client: Client):
        self._client = client

    @classmethod
    def connect(cls, url: str, key: str, cached: bool = True) -> "SupabaseClient":
        """
        Build a wrapper around a process-wide client for this url/key.

        Args:
            url: Supabase project URL
            key: Service role or anon key
            cached: Share one client per url/key. Pass False for flows that
                sign in, since the client holds the signed-in session.

        Raises:
            SupabaseClientError: If client creation fails
        """
        try:
            client = _create_cached_client(url, key) if cached else create_client(url, key)
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to create Supabase client: {e}",
                code="CLIENT_INIT_FAILED",
                suggestion="Check SUPABASE_URL and the Supabase key in your .env file"
            )
        return cls(client)

    @property
    def auth(self):
        """The Supabase auth API (sessions, OTP, admin)."""
        return self._client.auth

    @staticmethod
    def _first(response) -> dict[str, Any] | None:
        rows = response.data or []
        return rows[0] if rows else None

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    def ping(self) -> None:
        """Run a trivial query to confirm connectivity."""
        self._client.table("profiles").select("id").limit(1).execute()

    # -------------------------------------------------------------------------
    # Profiles
    # -------------------------------------------------------------------------

    def fetch_profile(self, profile_id: str) -> dict[str, Any] | None:
        """
        Fetch a profile by ID.

        Args:
            profile_id: The profile UUID

        Returns:
            Profile dict, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        try:
            response = (
                self._client.table("profiles")
                .select("*")
                .eq("id", profile_id)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            # Check if it's a "not found" error
            if "PGRST116" in str(e):  # PostgREST code for no rows
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch profile: {e}",
                code="FETCH_PROFILE_FAILED",
                suggestion="Check that the profile_id exists",
                details={"profile_id": profile_id}
            )

    def fetch_profile_by_email(self, email: str) -> dict[str, Any] | None:
        """
        Fetch a profile by its (lower-cased) email.

        Returns:
            Profile dict, or None if no profile uses this email

        Raises:
            SupabaseClientError: If query fails
        """
        try:
            response = (
                self._client.table("profiles")
                .select("*")
                .eq("email", email)
                .limit(1)
                .execute()
            )
            return self._first(response)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch profile by email: {e}",
                code="FETCH_PROFILE_FAILED",
                details={"email": email}
            )

    def insert_profile(self, data: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a new profile row.

        Returns:
            The inserted profile

        Raises:
            SupabaseClientError: If the insert fails or returns no row
        """
        try:
            response = self._client.table("profiles").insert(data).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert profile: {e}",
                code="INSERT_PROFILE_FAILED",
                suggestion="Check that the email is not already used by another profile",
                details={"email": data.get("email")}
            )

        profile = self._first(response)
        if profile is None:
            raise SupabaseClientError(
                message="Profile insert returned no data",
                code="INSERT_PROFILE_FAILED",
                details={"email": data.get("email")}
            )
        logger.info(f"Created profile {profile.get('id')} for {data.get('email')}")
        return profile

    def update_profile(self, profile_id: str, data: dict[str, Any]) -> dict[str, Any] | None:
        """
        Update selected columns of a profile.

        Raises:
            SupabaseClientError: If the update fails
        """
        try:
            response = (
                self._client.table("profiles")
                .update(data)
                .eq("id", profile_id)
                .execute()
            )
            return self._first(response)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update profile: {e}",
                code="UPDATE_PROFILE_FAILED",
                details={"profile_id": profile_id, "fields": sorted(data)}
            )

    def upsert_profile(self, data: dict[str, Any]) -> dict[str, Any] | None:
        """
        Insert or update a profile keyed by id.

        Raises:
            SupabaseClientError: If the upsert fails
        """
        try:
            response = self._client.table("profiles").upsert(data, on_conflict="id").execute()
            return self._first(response)
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to upsert profile: {e}",
                code="UPSERT_PROFILE_FAILED",
                details={"profile_id": data.get("id")}
            )

    def fetch_membership_snapshot(self, profile_id: str) -> dict[str, Any] | None:
        """
        Fetch the plan name and next billing date shown on the member's account.

        Returns:
            {"membership_tier": ..., "next_billing_date": ...} or None
        """
        try:
            response = (
                self._client.table("profiles")
                .select("membership_tier, next_billing_date")
                .eq("id", profile_id)
                .limit(1)
                .execute()
            )
            return self._first(response)
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to load membership snapshot: {e}",
                code="FETCH_PROFILE_FAILED",
                details={"profile_id": profile_id}
            )

    # -------------------------------------------------------------------------
    # Assessments
    # -------------------------------------------------------------------------

    def fetch_assessment(self, assessment_id: str) -> dict[str, Any] | None:
        """Fetch one assessment by id, or None if not found."""
        try:
            response = (
                self._client.table("assessments")
                .select("*")
                .eq("id", assessment_id)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if "PGRST116" in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch assessment: {e}",
                code="FETCH_ASSESSMENT_FAILED",
                details={"assessment_id": assessment_id}
            )

    def fetch_latest_assessment(
        self,
        email: str,
        since_iso: str,
    ) -> dict[str, Any] | None:
        """
        Fetch the newest assessment submitted for an email since a timestamp.

        Args:
            email: Lower-cased email as entered on the assessment
            since_iso: ISO-8601 lower bound for created_at

        Returns:
            The newest matching assessment, or None
        """
        try:
            response = (
                self._client.table("assessments")
                .select("id, created_at, profile_id")
                .eq("email_entered", email)
                .gte("created_at", since_iso)
                .order("created_at", desc=True)
                .limit(1)
                .execute()
            )
            return self._first(response)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch recent assessment: {e}",
                code="FETCH_ASSESSMENT_FAILED",
                details={"email": email}
            )

    def insert_assessment(self, data: dict[str, Any]) -> dict[str, Any]:
        """
        Insert an assessment row. Assessments are never updated afterwards
        except for the profile backfill done by the payment webhook.

        Raises:
            SupabaseClientError: If the insert fails or returns no row
        """
        try:
            response = self._client.table("assessments").insert(data).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert assessment: {e}",
                code="INSERT_ASSESSMENT_FAILED",
                details={"profile_id": data.get("profile_id")}
            )

        assessment = self._first(response)
        if assessment is None:
            raise SupabaseClientError(
                message="Assessment insert returned no data",
                code="INSERT_ASSESSMENT_FAILED",
                details={"profile_id": data.get("profile_id")}
            )
        return assessment

    def link_assessment_to_profile(self, assessment_id: str, profile_id: str) -> None:
        """Attach an anonymous assessment to the profile that paid for it."""
        try:
            (
                self._client.table("assessments")
                .update({"profile_id": profile_id})
                .eq("id", assessment_id)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to link assessment: {e}",
                code="UPDATE_ASSESSMENT_FAILED",
                details={"assessment_id": assessment_id, "profile_id": profile_id}
            )

    # -------------------------------------------------------------------------
    # Subscriptions, Memberships & Invoices
    # -------------------------------------------------------------------------

    def fetch_active_subscription(
        self,
        profile_id: str,
        statuses: list[str],
    ) -> dict[str, Any] | None:
        """
        Fetch a subscription for a profile whose status is in `statuses`.

        Returns:
            The first matching subscription, or None
        """
        try:
            response = (
                self._client.table("subscriptions")
                .select("id, status")
                .eq("profile_id", profile_id)
                .in_("status", statuses)
                .limit(1)
                .execute()
            )
            return self._first(response)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch subscription: {e}",
                code="FETCH_SUBSCRIPTION_FAILED",
                details={"profile_id": profile_id}
            )

    def upsert_subscription(self, data: dict[str, Any]) -> None:
        """Insert or update a subscription keyed by stripe_subscription_id."""
        try:
            (
                self._client.table("subscriptions")
                .upsert(data, on_conflict="stripe_subscription_id")
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to upsert subscription: {e}",
                code="UPSERT_SUBSCRIPTION_FAILED",
                details={"stripe_subscription_id": data.get("stripe_subscription_id")}
            )

    def update_subscription_status(self, stripe_subscription_id: str, status: str) -> None:
        """Set the status of a subscription identified by its Stripe id."""
        try:
            (
                self._client.table("subscriptions")
                .update({"status": status})
                .eq("stripe_subscription_id", stripe_subscription_id)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update subscription status: {e}",
                code="UPDATE_SUBSCRIPTION_FAILED",
                details={"stripe_subscription_id": stripe_subscription_id, "status": status}
            )

    def fetch_subscription_by_stripe_id(self, stripe_subscription_id: str) -> dict[str, Any] | None:
        """Fetch our subscription row for a Stripe subscription id."""
        try:
            response = (
                self._client.table("subscriptions")
                .select("*")
                .eq("stripe_subscription_id", stripe_subscription_id)
                .limit(1)
                .execute()
            )
            return self._first(response)
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch subscription: {e}",
                code="FETCH_SUBSCRIPTION_FAILED",
                details={"stripe_subscription_id": stripe_subscription_id}
            )

    def upsert_membership(self, data: dict[str, Any]) -> None:
        """Insert or update the membership row for a profile."""
        try:
            self._client.table("memberships").upsert(data, on_conflict="profile_id").execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to upsert membership: {e}",
                code="UPSERT_MEMBERSHIP_FAILED",
                details={"profile_id": data.get("profile_id")}
            )

    def insert_invoice(self, data: dict[str, Any]) -> None:
        """Record a Stripe invoice outcome."""
        try:
            self._client.table("invoices").upsert(data, on_conflict="stripe_invoice_id").execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to record invoice: {e}",
                code="INSERT_INVOICE_FAILED",
                details={"stripe_invoice_id": data.get("stripe_invoice_id")}
            )

    def fetch_profile_by_customer(self, stripe_customer_id: str) -> dict[str, Any] | None:
        """Fetch the profile that owns a Stripe customer id."""
        try:
            response = (
                self._client.table("profiles")
                .select("*")
                .eq("stripe_customer_id", stripe_customer_id)
                .limit(1)
                .execute()
            )
            return self._first(response)
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch profile by customer: {e}",
                code="FETCH_PROFILE_FAILED",
                details={"stripe_customer_id": stripe_customer_id}
            )

    # -------------------------------------------------------------------------
    # Webhook Idempotency
    # -------------------------------------------------------------------------

    def is_event_processed(self, event_id: str) -> bool:
        """Check whether a Stripe event id has already been handled."""
        try:
            response = (
                self._client.table("processed_events")
                .select("stripe_event_id")
                .eq("stripe_event_id", event_id)
                .limit(1)
                .execute()
            )
            return bool(response.data)
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to check processed events: {e}",
                code="FETCH_EVENT_FAILED",
                details={"event_id": event_id}
            )

    def mark_event_processed(self, event_id: str, event_type: str) -> None:
        """Remember a handled Stripe event id."""
        try:
            (
                self._client.table("processed_events")
                .insert({"stripe_event_id": event_id, "event_type": event_type})
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to record processed event: {e}",
                code="INSERT_EVENT_FAILED",
                details={"event_id": event_id}
            )

    # -------------------------------------------------------------------------
    # Auth Users & Admins
    # -------------------------------------------------------------------------

    def find_auth_user_by_email(self, email: str) -> dict[str, Any] | None:
        """
        Find an auth user by case-insensitive email match.

        Scans auth.admin.list_users page by page until a match is found or
        a short page signals the end of the list.

        Returns:
            {"id", "email", "user_metadata"} or None
        """
        target = email.strip().lower()
        page = 1

        try:
            while True:
                users = self._client.auth.admin.list_users(page=page, per_page=AUTH_USERS_PAGE_SIZE)
                for user in users:
                    if (user.email or "").lower() == target:
                        return {
                            "id": str(user.id),
                            "email": user.email,
                            "user_metadata": user.user_metadata or {},
                        }
                if len(users) < AUTH_USERS_PAGE_SIZE:
                    return None
                page += 1

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to list auth users: {e}",
                code="LIST_USERS_FAILED",
                suggestion="Check that SUPABASE_SERVICE_ROLE_KEY is a service role key",
                details={"page": page}
            )

    def create_auth_user(
        self,
        email: str,
        user_metadata: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """
        Create a confirmed auth user for an email.

        An "already registered" response (HTTP 422) is not an error: the
        identity exists and None is returned.

        Raises:
            SupabaseClientError: For any other failure
        """
        try:
            response = self._client.auth.admin.create_user({
                "email": email,
                "email_confirm": True,
                "user_metadata": {k: v for k, v in (user_metadata or {}).items() if v is not None},
            })
        except Exception as e:
            if getattr(e, "status", None) == 422:
                logger.info(f"Auth user already exists for {email}")
                return None
            raise SupabaseClientError(
                message=f"Failed to create auth user: {e}",
                code="CREATE_USER_FAILED",
                details={"email": email}
            )

        user = response.user
        logger.info(f"Created auth user {user.id} for {email}")
        return {"id": str(user.id), "email": user.email, "user_metadata": user.user_metadata or {}}

    def is_active_admin(self, user_id: str) -> bool:
        """
        Check whether a user id has an active row in admin_profiles.

        Raises:
            SupabaseClientError: If query fails
        """
        try:
            response = (
                self._client.table("admin_profiles")
                .select("id")
                .eq("id", user_id)
                .eq("is_active", True)
                .limit(1)
                .execute()
            )
            return bool(response.data)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to determine admin status: {e}",
                code="FETCH_ADMIN_FAILED",
                details={"user_id": user_id}
            )
