from __future__ import annotations

from typing import Optional, Protocol

from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): the service layer depends on this interface, not on a concrete DB.
    """

    def create_user(self, *, full_name: str, email: str, password_hash: str, phone_number: str) -> User:
        """Insert a user. Raises DuplicateError(field="email") when taken."""

        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def update_user(self, user: User) -> bool:
        raise NotImplementedError
