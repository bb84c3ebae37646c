from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional, Sequence

import mysql.connector

from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .connection import DatabaseConnection

# SQLSTATE raised by SIGNAL in the stored procedures (see database/schema.sql).
SQLSTATE_FORBIDDEN = "45000"
SQLSTATE_NOT_FOUND = "45004"
SQLSTATE_INVALID = "45022"


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def call_procedure(cur, name: str, args: Sequence[Any]) -> List[Dict[str, Any]]:
    """Call a stored procedure and collect every row of its result sets.

    Procedure-level SIGNALs are translated into domain exceptions so services
    never see driver errors for rule violations enforced server-side.
    """

    try:
        cur.callproc(name, tuple(args))
    except mysql.connector.Error as e:
        sqlstate = getattr(e, "sqlstate", None)
        message = getattr(e, "msg", None) or str(e)
        if sqlstate == SQLSTATE_FORBIDDEN:
            raise AuthorizationError(message) from e
        if sqlstate == SQLSTATE_NOT_FOUND:
            raise NotFoundError(message) from e
        if sqlstate == SQLSTATE_INVALID:
            raise ValidationError(message) from e
        raise

    rows: List[Dict[str, Any]] = []
    for result in cur.stored_results():
        for row in result.fetchall():
            if isinstance(row, dict):
                rows.append(row)
            else:
                rows.append(dict(zip(result.column_names, row)))
    return rows


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Normalize MySQL TIME values across connector implementations.

    mysql-connector can return TIME as:
    - datetime.time
    - datetime.timedelta
    - string (e.g. '08:30:00')
    """

    if value is None:
        return None

    if isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds()) % 86400
        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        seconds = total_seconds % 60
        return time(hour=hours, minute=minutes, second=seconds)

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
        return time(hour=hours, minute=minutes, second=seconds)

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")


def decode_json_list(value: Any) -> list[str]:
    """JSON columns arrive as str (pure driver) or bytes (C extension)."""

    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    return [str(v) for v in json.loads(value or "[]")]


def encode_json_list(items: Sequence[str]) -> str:
    return json.dumps(list(items))
