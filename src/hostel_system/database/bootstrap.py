from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig

logger = logging.getLogger(__name__)

DEMO_ACCOUNTS = (
    # email, password, name, roll number, role, department, block, room
    ("admin@hostel.local", "admin123", "Admin Demo", "ADM-001", "admin", None, None, None),
    ("warden@hostel.local", "warden123", "Warden Demo", "WRD-001", "warden", "Block A", "A", None),
    ("student@hostel.local", "student123", "Student Demo", "STU-001", "student", None, "A", "102"),
)

_DELIMITER_RE = re.compile(r"^\s*DELIMITER\s+(\S+)\s*$", re.IGNORECASE)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a SQL script into statements.

    Understands the client-side ``DELIMITER`` directive used around stored
    procedures, ignores delimiters inside quotes and skips ``--`` comments.
    """

    delimiter = ";"
    buf: list[str] = []

    for line in sql.splitlines(keepends=True):
        m = _DELIMITER_RE.match(line)
        if m:
            delimiter = m.group(1)
            continue
        if line.lstrip().startswith("--"):
            continue
        buf.append(line)

        text = "".join(buf)
        statements, rest = _split_complete(text, delimiter)
        for stmt in statements:
            yield stmt
        buf = [rest] if rest else []

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _split_complete(text: str, delimiter: str) -> tuple[list[str], str]:
    out: list[str] = []
    start = 0
    i = 0
    in_single = False
    in_double = False
    escape = False

    while i < len(text):
        ch = text[i]
        if escape:
            escape = False
        elif ch == "\\":
            escape = True
        elif ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif not in_single and not in_double and text.startswith(delimiter, i):
            stmt = text[start:i].strip()
            if stmt:
                out.append(stmt)
            i += len(delimiter)
            start = i
            continue
        i += 1

    return out, text[start:]


def _exec_sql(cur, sql: str) -> None:
    for stmt in _iter_sql_statements(sql):
        cur.execute(stmt)


def _connect(target: DBConfig, *, with_database: bool = True):
    return mysql.connector.connect(use_pure=True, **target.connect_kwargs(with_database=with_database))


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    _apply_script(db_config, Path(schema_path))


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    _apply_script(db_config, Path(seed_path))


def _apply_script(db_config: dict, path: Path) -> None:
    target = DBConfig.from_dict(db_config)
    sql = _strip_create_db_and_use(path.read_text(encoding="utf-8"))

    conn = _connect(target)
    try:
        cur = conn.cursor()
        _exec_sql(cur, sql)
        conn.commit()
    finally:
        conn.close()
    logger.info("Applied %s to %s@%s/%s", path.name, target.user, target.host, target.database)


def ensure_demo_users(db_config: dict) -> None:
    """Create (or reset) one account per role, with matching profiles."""

    target = DBConfig.from_dict(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor(dictionary=True)

        for email, password, name, roll, role, department, block, room in DEMO_ACCOUNTS:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT user_id FROM accounts WHERE email=%s", (email,))
            existing = cur.fetchone()
            if existing:
                user_id = int(existing["user_id"])
                cur.execute(
                    "UPDATE accounts SET password_hash=%s, name=%s, roll_number=%s, is_active=1 WHERE user_id=%s",
                    (password_hash, name, roll, user_id),
                )
            else:
                cur.execute(
                    "INSERT INTO accounts (email, password_hash, name, roll_number) VALUES (%s, %s, %s, %s)",
                    (email, password_hash, name, roll),
                )
                user_id = int(cur.lastrowid)

            cur.execute(
                """
                INSERT INTO profiles (user_id, name, roll_number, role, department, hostel_block, room_number)
                VALUES (%s, %s, %s, %s, %s, %s, %s)
                ON DUPLICATE KEY UPDATE role=VALUES(role), department=VALUES(department)
                """,
                (user_id, name, roll, role, department, block, room),
            )

        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
