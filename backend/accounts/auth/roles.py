"""Admin-only role changes."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from accounts.auth.errors import ForbiddenError
from accounts.auth.models import Role

if TYPE_CHECKING:
    from accounts.auth.credentials import CredentialStore
    from accounts.auth.models import AuthSession, User

logger = structlog.get_logger()


class AdminRoleManager:
    """Promote and demote users on behalf of an admin caller.

    The caller's role is checked here even though admin routes are already
    gated. There is no guard against an admin demoting themselves.
    """

    def __init__(self, credentials: CredentialStore) -> None:
        self._credentials = credentials

    async def promote(self, caller: AuthSession | None, target_user_id: str) -> User:
        return await self._change_role(caller, target_user_id, Role.ADMIN)

    async def demote(self, caller: AuthSession | None, target_user_id: str) -> User:
        return await self._change_role(caller, target_user_id, Role.USER)

    async def _change_role(self, caller: AuthSession | None, target_user_id: str, role: Role) -> User:
        if caller is None or caller.role != Role.ADMIN:
            logger.warning(
                "role change rejected",
                caller_id=caller.user_id if caller else None,
                target_id=target_user_id,
                role=role,
            )
            raise ForbiddenError("Forbidden")
        user = await self._credentials.set_role(target_user_id, role)
        logger.info("role changed", caller_id=caller.user_id, target_id=target_user_id, role=role)
        return user
