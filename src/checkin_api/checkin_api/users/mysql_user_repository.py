from __future__ import annotations

import uuid
from typing import Optional

import mysql.connector

from ..common.datetime_utils import ensure_utc, to_db, utc_now
from ..core.exceptions import DuplicateError
from ..database.connection import ConnectionSource
from ..database.mysql_base import db_cursor, duplicate_key_name, fetchone
from .model import User
from .repository import UserRepository

_USER_EMAIL_KEY = "uq_users_email"


def _to_user(row: dict) -> User:
    return User(
        id=row["id"],
        full_name=row["full_name"],
        email=row["email"],
        password_hash=row["password_hash"],
        phone_number=row.get("phone_number") or "",
        created_at=ensure_utc(row.get("created_at")),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: ConnectionSource):
        self._conn_factory = conn_factory

    def create_user(self, *, full_name: str, email: str, password_hash: str, phone_number: str) -> User:
        user = User(
            id=str(uuid.uuid4()),
            full_name=full_name,
            email=email,
            password_hash=password_hash,
            phone_number=phone_number,
            created_at=utc_now(),
        )
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO users(id, full_name, email, password_hash, phone_number, created_at)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (user.id, full_name, email, password_hash, phone_number, to_db(user.created_at)),
                )
            except mysql.connector.IntegrityError as exc:
                if duplicate_key_name(exc) == _USER_EMAIL_KEY:
                    raise DuplicateError("email") from exc
                raise
        return user

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, full_name, email, password_hash, phone_number, created_at
                FROM users
                WHERE email=%s
                """,
                (email,),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_id(self, user_id: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, full_name, email, password_hash, phone_number, created_at
                FROM users
                WHERE id=%s
                """,
                (user_id,),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def update_user(self, user: User) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET full_name=%s, phone_number=%s
                WHERE id=%s
                """,
                (user.full_name, user.phone_number, user.id),
            )
            return cur.rowcount > 0
