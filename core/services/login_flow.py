# =============================================================================
# core/services/login_flow.py - Login Link Flow
# =============================================================================
# The login page's state machine and the resend cooldown:
#
#   form --submit--> confirming --sent--> confirmed
#                        |
#                        +--error--> form (message shown inline)
#
# The cooldown is a separate decrementing counter gating re-sends; it does not
# change the flow state. There is no timeout on any state.
# =============================================================================

import logging
import math
import threading
import time
from typing import Callable

from app.exceptions import CooldownActiveError, MembershipException
from core.models.pages import LoginPageState, LoginState
from core.models.plan import DEFAULT_PLAN, plan_slug
from lib.preferences import PreferenceStore

logger = logging.getLogger(__name__)

DEFAULT_COOLDOWN_SECONDS = 60

CHECKOUT_CANCELLED_MESSAGE = "Checkout was cancelled. You can try again when you are ready."
GENERIC_LOGIN_ERROR = "Something went wrong. Please try again."


class Cooldown:
    """
    Countdown that blocks re-sending a login link.

    Args:
        seconds: Length of the cooldown once started
        clock: Returns the current time in seconds (defaults to time.monotonic)
    """

    def __init__(self, seconds: int = DEFAULT_COOLDOWN_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.seconds = seconds
        self._clock = clock
        self._until: float | None = None

    def start(self) -> None:
        self._until = self._clock() + self.seconds

    def remaining(self) -> int:
        """Whole seconds left, rounded up; 0 when not cooling down."""
        if self._until is None:
            return 0
        left = self._until - self._clock()
        if left <= 0:
            self._until = None
            return 0
        return math.ceil(left)

    @property
    def active(self) -> bool:
        return self.remaining() > 0

    def check(self) -> None:
        """
        Raises:
            CooldownActiveError: While the countdown is running
        """
        left = self.remaining()
        if left > 0:
            raise CooldownActiveError(left)


class CooldownRegistry:
    """
    Process-wide cooldowns keyed by email.

    Stored on app.state so every request for the same email shares one
    countdown. Entries that have been idle for a full cooldown length are
    dropped on each lookup, so the map only holds recently used emails.
    """

    def __init__(self, seconds: int = DEFAULT_COOLDOWN_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.seconds = seconds
        self._clock = clock
        self._cooldowns: dict[str, Cooldown] = {}
        self._last_used: dict[str, float] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Cooldown:
        with self._lock:
            now = self._clock()
            self._sweep(now)
            cooldown = self._cooldowns.get(key)
            if cooldown is None:
                cooldown = Cooldown(self.seconds, self._clock)
                self._cooldowns[key] = cooldown
            self._last_used[key] = now
            return cooldown

    def __len__(self) -> int:
        return len(self._cooldowns)

    def _sweep(self, now: float) -> None:
        # Caller holds the lock
        stale = [
            key for key, cooldown in self._cooldowns.items()
            if not cooldown.active and now - self._last_used[key] >= self.seconds
        ]
        for key in stale:
            del self._cooldowns[key]
            del self._last_used[key]


class LoginFlow:
    """
    Login page state machine.

    Example:
        flow = LoginFlow(provider.login, preferences)
        flow.submit("owner@acme.com")
        flow.state  # "confirmed"
    """

    def __init__(
        self,
        login: Callable[[str], None],
        preferences: PreferenceStore | None = None,
        cooldown: Cooldown | None = None,
    ):
        self._login = login
        self.preferences = preferences or PreferenceStore()
        self.cooldown = cooldown or Cooldown()
        self.state: LoginState = "form"
        self.error: str | None = None
        self.email: str = self.preferences.last_email() or ""

    def submit(self, email: str | None = None) -> LoginState:
        """
        Send the login link. Ignored unless the flow is showing the form.

        Returns:
            The state after the attempt
        """
        email = (email if email is not None else self.email) or ""
        if not email.strip() or self.state != "form":
            return self.state

        trimmed = email.strip()
        self.email = trimmed
        self.error = None
        self.state = "confirming"

        try:
            self.preferences.remember_email(trimmed)
            self._login(trimmed)
        except MembershipException as e:
            logger.info(f"Login flow failed for {trimmed}: {e.message}")
            self.error = e.message
            self.state = "form"
            return self.state
        except Exception:
            logger.exception("Failed to initiate login flow")
            self.error = GENERIC_LOGIN_ERROR
            self.state = "form"
            return self.state

        self.cooldown.start()
        self.state = "confirmed"
        return self.state

    def resend(self) -> LoginState:
        """
        Send the link again from the confirmation screen.

        Raises:
            CooldownActiveError: While the resend countdown is running
        """
        self.cooldown.check()
        self.state = "form"
        return self.submit(self.email)

    def snapshot(self) -> LoginPageState:
        return LoginPageState(state=self.state, email=self.email or None, error=self.error)


def handle_checkout_return(checkout: str | None, preferences: PreferenceStore) -> LoginPageState:
    """
    Interpret ?checkout=... when a visitor lands on the login page.

    - success   -> redirect to /success/<cached plan or founding-member>
    - cancelled -> stay on the form with a notice
    - anything else -> plain form
    """
    email = preferences.last_email()

    if checkout == "success":
        slug = plan_slug(preferences.last_plan() or DEFAULT_PLAN.value)
        return LoginPageState(email=email, redirect=f"/success/{slug}")

    if checkout == "cancelled":
        return LoginPageState(email=email, error=CHECKOUT_CANCELLED_MESSAGE)

    return LoginPageState(email=email)
