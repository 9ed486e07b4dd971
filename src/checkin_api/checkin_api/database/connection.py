from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

import mysql.connector


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config["host"]),
            port=int(db_config.get("port", 3306)),
            user=str(db_config["user"]),
            password=str(db_config["password"]),
            database=str(db_config["database"]),
        )


class DatabaseConnection:
    """DB connection factory.

    Note: Outside a transaction we create short-lived connections per operation.
    Built once by the container and injected into repositories.
    """

    def __init__(self, config: DBConfig):
        self._config = config

    def connect(self):
        return mysql.connector.connect(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
            autocommit=False,
        )


class BoundConnection:
    """A live connection owned by an open transaction.

    Repositories built on it share the transaction; commit/rollback/close are
    left to the transaction manager.
    """

    def __init__(self, conn: Any):
        self._conn = conn

    def connect(self):
        return self._conn


ConnectionSource = Union[DatabaseConnection, BoundConnection]
