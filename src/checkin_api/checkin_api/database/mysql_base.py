from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import StoreError
from .connection import BoundConnection, ConnectionSource


@contextmanager
def db_cursor(conn_factory: ConnectionSource, *, dictionary: bool = True):
    owned = not isinstance(conn_factory, BoundConnection)
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            if owned:
                conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as exc:
        if owned:
            conn.rollback()
        raise StoreError(str(exc)) from exc
    except Exception:
        if owned:
            conn.rollback()
        raise
    finally:
        if owned:
            conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def duplicate_key_name(exc: mysql.connector.IntegrityError) -> Optional[str]:
    """Name of the unique key a duplicate-entry error hit, if any.

    MySQL reports: Duplicate entry 'x' for key 'table.key_name'.
    """
    if exc.errno != errorcode.ER_DUP_ENTRY:
        return None
    msg = str(exc.msg or "")
    marker = "for key '"
    if marker not in msg:
        return ""
    key = msg.split(marker, 1)[1].rstrip("'")
    return key.rsplit(".", 1)[-1]
