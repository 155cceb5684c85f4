# =============================================================================
# core/admin/admin_users.py - Admin Users Screen
# =============================================================================

from __future__ import annotations

import logging
import uuid

from core.admin.repository import InMemoryRepository
from core.models.admin import ActionResult, AdminUser, AdminUserInvite, AdminUserUpdate

logger = logging.getLogger(__name__)


class AdminUserService:
    def __init__(self, repository: InMemoryRepository[AdminUser]):
        self.repository = repository

    def list(self) -> list[AdminUser]:
        return self.repository.list()

    def invite(self, invite: AdminUserInvite) -> ActionResult[AdminUser]:
        user = AdminUser(
            id=f"admin_{uuid.uuid4().hex[:8]}",
            name=invite.name.strip(),
            email=invite.email.strip().lower(),
            role=invite.role,
            status="Active",
            last_login="-",
        )
        self.repository.add(user)
        logger.info(f"[admin] invited {user.email} as {user.role}")
        return ActionResult[AdminUser](item=user, toast="Admin invited (demo).")

    def update(self, user_id: str, update: AdminUserUpdate) -> ActionResult[AdminUser]:
        user = self.repository.update(user_id, **update.model_dump(exclude_none=True))
        return ActionResult[AdminUser](item=user, toast="Admin user updated.")

    def toggle_status(self, user_id: str) -> ActionResult[AdminUser]:
        """Flip Active <-> Suspended."""
        current = self.repository.get(user_id)
        status = "Suspended" if current.status == "Active" else "Active"
        user = self.repository.update(user_id, status=status)
        logger.info(f"[admin] {user_id} is now {status}")
        return ActionResult[AdminUser](item=user, toast=f"User {status.lower()}.")
