"""Abstract interface for user persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from accounts.auth.models import Role, User


class UserRepository(ABC):
    """Abstract interface for user persistence.

    Implementations must enforce username and email uniqueness atomically
    and raise DuplicateKeyError when an insert collides.
    """

    @abstractmethod
    async def create_user(self, user: User) -> None: ...

    @abstractmethod
    async def get_by_id(self, user_id: str) -> User | None: ...

    @abstractmethod
    async def get_by_email(self, email: str) -> User | None: ...

    @abstractmethod
    async def list_users(self) -> list[User]: ...

    @abstractmethod
    async def set_role(self, user_id: str, role: Role) -> User | None:
        """Update the role and return the updated user, or None if unknown."""
