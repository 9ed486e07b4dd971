from __future__ import annotations

from datetime import timedelta

import jwt

from ..common.datetime_utils import utc_now
from ..core.constants import (
    DEFAULT_ACCESS_TOKEN_TTL_SECONDS,
    DEFAULT_REFRESH_TOKEN_TTL_SECONDS,
    JWT_ALGORITHM,
)
from ..core.exceptions import AuthenticationError
from .model import TokenPair, User

ACCESS = "access"
REFRESH = "refresh"


class TokenService:
    """Issues and verifies HS256 bearer tokens carrying the user id."""

    def __init__(
        self,
        secret: str,
        *,
        access_ttl_seconds: int = DEFAULT_ACCESS_TOKEN_TTL_SECONDS,
        refresh_ttl_seconds: int = DEFAULT_REFRESH_TOKEN_TTL_SECONDS,
        algorithm: str = JWT_ALGORITHM,
    ):
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self._secret = secret
        self._access_ttl = int(access_ttl_seconds)
        self._refresh_ttl = int(refresh_ttl_seconds)
        self._algorithm = algorithm

    def _encode(self, claims: dict, ttl_seconds: int) -> str:
        now = utc_now()
        payload = dict(claims)
        payload["iat"] = int(now.timestamp())
        payload["exp"] = int((now + timedelta(seconds=ttl_seconds)).timestamp())
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def _decode(self, token: str) -> dict:
        try:
            return jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("token expired")
        except jwt.InvalidTokenError:
            raise AuthenticationError("invalid token")

    def issue_pair(self, user: User) -> TokenPair:
        access = self._encode({"user_id": user.id, "email": user.email, "type": ACCESS}, self._access_ttl)
        refresh = self._encode({"user_id": user.id, "type": REFRESH}, self._refresh_ttl)
        return TokenPair(access_token=access, refresh_token=refresh)

    def _user_id(self, claims: dict, expected_type: str) -> str:
        if claims.get("type") != expected_type:
            raise AuthenticationError("invalid token type")
        user_id = claims.get("user_id")
        if not isinstance(user_id, str) or not user_id:
            raise AuthenticationError("invalid user id in token")
        return user_id

    def verify_access(self, token: str) -> str:
        return self._user_id(self._decode(token), ACCESS)

    def verify_refresh(self, token: str) -> str:
        return self._user_id(self._decode(token), REFRESH)
