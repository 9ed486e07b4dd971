from __future__ import annotations

from dataclasses import replace
from typing import Optional

import structlog
from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import FieldErrors
from ..core.constants import MIN_FULL_NAME_LENGTH, MIN_PASSWORD_LENGTH
from ..core.exceptions import AuthenticationError, DuplicateError, NotFoundError
from .model import TokenPair, User
from .repository import UserRepository
from .tokens import TokenService


class AuthService:
    """Use cases: register, login, refresh tokens."""

    def __init__(self, users: UserRepository, tokens: TokenService, *, logger=None):
        self._users = users
        self._tokens = tokens
        self._log = logger or structlog.get_logger(__name__)

    def register(self, *, full_name: str, email: str, password: str, phone_number: str) -> User:
        errors = FieldErrors()
        full_name = errors.min_length("full_name", full_name, MIN_FULL_NAME_LENGTH)
        email = errors.email("email", email)
        errors.min_length("password", password, MIN_PASSWORD_LENGTH)
        phone_number = errors.require("phone_number", phone_number)
        errors.raise_if_any()

        if self._users.get_by_email(email):
            raise DuplicateError("email")

        user = self._users.create_user(
            full_name=full_name,
            email=email,
            password_hash=generate_password_hash(password),
            phone_number=phone_number,
        )
        self._log.info("user_registered", user_id=user.id)
        return user

    def login(self, *, email: str, password: str) -> TokenPair:
        errors = FieldErrors()
        email = errors.email("email", email)
        errors.require("password", password)
        errors.raise_if_any()

        user = self._users.get_by_email(email)
        if not user:
            raise AuthenticationError("invalid credentials")

        try:
            ok = check_password_hash(user.password_hash, password)
        except ValueError:
            # e.g. placeholder or corrupted hashes
            ok = False
        if not ok:
            self._log.info("login_rejected", user_id=user.id)
            raise AuthenticationError("invalid credentials")

        return self._tokens.issue_pair(user)

    def refresh_token(self, refresh_token: str) -> TokenPair:
        if not refresh_token:
            raise AuthenticationError("invalid refresh token")
        user_id = self._tokens.verify_refresh(refresh_token)

        user = self._users.get_by_id(user_id)
        if not user:
            raise AuthenticationError("user not found")
        return self._tokens.issue_pair(user)

    def authenticate(self, access_token: str) -> str:
        """Resolve a bearer access token to the caller's user id."""
        return self._tokens.verify_access(access_token)


class UserService:
    """Use cases: read and update one's own profile."""

    def __init__(self, users: UserRepository, *, logger=None):
        self._users = users
        self._log = logger or structlog.get_logger(__name__)

    def get_profile(self, user_id: str) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("user not found")
        return user

    def update_profile(
        self,
        user_id: str,
        *,
        full_name: Optional[str] = None,
        phone_number: Optional[str] = None,
    ) -> User:
        user = self.get_profile(user_id)

        errors = FieldErrors()
        if full_name:
            full_name = errors.min_length("full_name", full_name, MIN_FULL_NAME_LENGTH)
        errors.raise_if_any()

        changes = {}
        if full_name:
            changes["full_name"] = full_name
        if phone_number and phone_number.strip():
            changes["phone_number"] = phone_number.strip()
        if not changes:
            return user

        updated = replace(user, **changes)
        self._users.update_user(updated)
        self._log.info("profile_updated", user_id=user_id, fields=sorted(changes))
        return updated
