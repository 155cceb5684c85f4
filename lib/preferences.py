# =============================================================================
# lib/preferences.py - Visitor Preference Store
# =============================================================================
# Holds the most recently used plan slug and email so forms can be pre-filled
# and returning visitors sent to the right post-payment page.
#
# Entries expire after a fixed TTL instead of living forever. The clock is
# injectable so expiry can be tested without sleeping.
#
# Usage:
#   prefs = PreferenceStore(ttl_seconds=30 * 86400)
#   prefs.remember_plan("gold")
#   prefs.last_plan()  # "gold"
# =============================================================================

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

PLAN_STORAGE_KEY = "restorationexpertise:last-plan"
EMAIL_STORAGE_KEY = "restorationexpertise:last-email"

DEFAULT_TTL_SECONDS = 30 * 24 * 3600  # 30 days


@dataclass
class _Entry:
    value: str
    expires_at: float


class PreferenceStore:
    """
    Key/value store with a per-entry time-to-live.

    Args:
        ttl_seconds: Lifetime of each entry from the moment it is written
        clock: Returns the current time in seconds (defaults to time.time)
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
        initial: dict[str, str] | None = None,
    ):
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def set(self, key: str, value: str | None) -> None:
        """Store a value; None or blank removes the key."""
        if value is None or not str(value).strip():
            self._entries.pop(key, None)
            return
        self._entries[key] = _Entry(value=str(value).strip(), expires_at=self._clock() + self._ttl)

    def get(self, key: str) -> str | None:
        """Return the value for key, or None when absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            return None
        return entry.value

    def clear(self) -> None:
        self._entries.clear()

    # -------------------------------------------------------------------------
    # Named preferences
    # -------------------------------------------------------------------------

    def remember_plan(self, plan: str | None) -> None:
        self.set(PLAN_STORAGE_KEY, plan)

    def remember_email(self, email: str | None) -> None:
        self.set(EMAIL_STORAGE_KEY, email.strip().lower() if email else None)

    def last_plan(self) -> str | None:
        return self.get(PLAN_STORAGE_KEY)

    def last_email(self) -> str | None:
        return self.get(EMAIL_STORAGE_KEY)
