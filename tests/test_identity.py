# =============================================================================
# tests/test_identity.py - Identity Provider Tests
# =============================================================================

from types import SimpleNamespace

import pytest

from core.models.user import AppUser
from core.services.identity_service import (
    MEMBER_NOT_FOUND_MESSAGE,
    IdentityProvider,
    LoginError,
    apply_membership_snapshot,
    build_app_user,
    format_renewal_date,
)
from lib.supabase_client import SupabaseClientError


def auth_user(email="owner@acme.com", full_name="Jane Owner", user_id="user-1"):
    return SimpleNamespace(id=user_id, email=email, user_metadata={"full_name": full_name} if full_name else {})


def auth_session(user):
    return SimpleNamespace(user=user, access_token="token-abc")


@pytest.fixture
def provider(mock_db):
    return IdentityProvider(mock_db, redirect_origin="https://restorationexpertise.com/")


# =============================================================================
# AppUser synthesis
# =============================================================================

class TestBuildAppUser:

    def test_new_member(self):
        user = build_app_user(auth_user(), "member")

        assert user.name == "Jane Owner"
        assert user.email == "owner@acme.com"
        assert user.account.role == "Owner"
        assert len(user.benefits) == 4

    def test_name_falls_back_to_email(self):
        user = build_app_user(auth_user(full_name=None), "admin")

        assert user.name == "owner@acme.com"
        assert user.account.role == "Administrator"

    def test_edits_survive_for_same_email(self):
        previous = build_app_user(auth_user(), "member")
        previous = previous.model_copy(update={"package": "Silver"})

        rebuilt = build_app_user(auth_user(full_name="Jane Q. Owner"), "member", previous)

        assert rebuilt.package == "Silver"
        assert rebuilt.name == "Jane Q. Owner"

    def test_different_email_starts_fresh(self):
        previous = build_app_user(auth_user(), "member").model_copy(update={"package": "Silver"})

        rebuilt = build_app_user(auth_user(email="other@acme.com"), "member", previous)

        assert rebuilt.package == "Gold"


class TestMembershipSnapshot:

    @pytest.fixture
    def user(self) -> AppUser:
        return build_app_user(auth_user(), "member")

    def test_renewal_format(self):
        assert format_renewal_date("2025-03-05T00:00:00Z") == "Mar 5, 2025"
        assert format_renewal_date("not a date") is None

    def test_applies_tier_and_date(self, user):
        updated = apply_membership_snapshot(user, {"membership_tier": "Founding Member", "next_billing_date": "2025-07-01"})

        assert updated.package == "Founding Member"
        assert updated.plan.name == "Founding Member"
        assert updated.plan.renewal_date == "Jul 1, 2025"

    def test_unknown_tier_keeps_plan_name(self, user):
        updated = apply_membership_snapshot(user, {"membership_tier": "Diamond", "next_billing_date": "garbage"})

        assert updated.plan.name == "Gold"
        assert updated.plan.renewal_date == "Mar 15, 2025"

    def test_empty_snapshot(self, user):
        assert apply_membership_snapshot(user, None) is user
        assert apply_membership_snapshot(user, {}) is user


# =============================================================================
# Provider
# =============================================================================

class TestIdentityProvider:

    def test_start_without_session(self, provider, mock_db):
        mock_db.auth.get_session.return_value = None

        provider.start()

        assert provider.current_user is None
        assert provider.is_admin is False
        assert provider.loading is False
        mock_db.auth.on_auth_state_change.assert_called_once()

    def test_start_with_admin_session(self, provider, mock_db):
        mock_db.auth.get_session.return_value = auth_session(auth_user())
        mock_db.is_active_admin.return_value = True

        provider.start()

        assert provider.is_admin is True
        assert provider.current_user.role == "admin"

    def test_session_fetch_error_means_signed_out(self, provider, mock_db):
        mock_db.auth.get_session.side_effect = RuntimeError("network")

        provider.start()

        assert provider.current_user is None
        assert provider.loading is False

    def test_admin_lookup_error_downgrades_to_member(self, provider, mock_db):
        mock_db.is_active_admin.side_effect = SupabaseClientError("rls")

        provider.apply_session(auth_session(auth_user()))

        assert provider.is_admin is False
        assert provider.current_user.role == "member"

    def test_close_unsubscribes(self, provider, mock_db):
        mock_db.auth.get_session.return_value = None
        subscription = mock_db.auth.on_auth_state_change.return_value

        provider.start()
        provider.close()

        subscription.unsubscribe.assert_called_once()

    def test_login_sends_link_to_existing_members_only(self, provider, mock_db):
        provider.login(" owner@acme.com ")

        mock_db.auth.sign_in_with_otp.assert_called_once_with({
            "email": "owner@acme.com",
            "options": {
                "should_create_user": False,
                "email_redirect_to": "https://restorationexpertise.com/member/dashboard",
            },
        })

    def test_login_failure_hides_provider_message(self, provider, mock_db):
        mock_db.auth.sign_in_with_otp.side_effect = RuntimeError("Signups not allowed for otp")

        with pytest.raises(LoginError) as exc_info:
            provider.login("stranger@acme.com")

        assert exc_info.value.message == MEMBER_NOT_FOUND_MESSAGE

    def test_logout_clears_state_even_on_error(self, provider, mock_db):
        provider.apply_session(auth_session(auth_user()))
        mock_db.auth.sign_out.side_effect = RuntimeError("offline")

        provider.logout()

        assert provider.session is None
        assert provider.current_user is None

    def test_update_user(self, provider):
        user = build_app_user(auth_user(), "member")
        provider.update_user(user)
        assert provider.current_user is user


class TestAdminLogin:

    def test_active_admin(self, provider, mock_db):
        user = auth_user()
        mock_db.auth.sign_in_with_password.return_value = SimpleNamespace(user=user, session=auth_session(user))
        mock_db.is_active_admin.return_value = True

        result = provider.admin_login("owner@acme.com", "secret")

        assert result == {"success": True}
        assert provider.is_admin is True
        assert provider.session.access_token == "token-abc"

    def test_bad_credentials(self, provider, mock_db):
        mock_db.auth.sign_in_with_password.side_effect = RuntimeError("Invalid login credentials")

        result = provider.admin_login("owner@acme.com", "wrong")

        assert result == {"success": False, "error": "Invalid email or password"}

    def test_not_an_admin_is_signed_out(self, provider, mock_db):
        user = auth_user()
        mock_db.auth.sign_in_with_password.return_value = SimpleNamespace(user=user, session=auth_session(user))
        mock_db.is_active_admin.return_value = False

        result = provider.admin_login("owner@acme.com", "secret")

        assert result == {"success": False, "error": "Access denied. You do not have admin privileges."}
        mock_db.auth.sign_out.assert_called_once()
        assert provider.session is None

    def test_admin_lookup_failure(self, provider, mock_db):
        user = auth_user()
        mock_db.auth.sign_in_with_password.return_value = SimpleNamespace(user=user, session=auth_session(user))
        mock_db.is_active_admin.side_effect = SupabaseClientError("rls")

        result = provider.admin_login("owner@acme.com", "secret")

        assert result == {"success": False, "error": "Access verification failed"}
