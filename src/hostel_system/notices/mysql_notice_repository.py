from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import Priority
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Notice
from .repository import NoticeRepository

_COLUMNS = "notice_id, title, content, priority, expires_at, created_at"


def row_to_notice(r: dict) -> Notice:
    return Notice(
        notice_id=int(r["notice_id"]),
        title=r["title"],
        content=r["content"],
        priority=Priority(r["priority"]),
        expires_at=r.get("expires_at"),
        created_at=r.get("created_at"),
    )


class MySQLNoticeRepository(NoticeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_active(self, *, now: datetime, limit: int) -> Sequence[Notice]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM notices
                WHERE expires_at IS NULL OR expires_at > %s
                ORDER BY FIELD(priority, 'high', 'medium', 'low'), created_at DESC, notice_id DESC
                LIMIT %s
                """,
                (now, int(limit)),
            )
            return [row_to_notice(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        title: str,
        content: str,
        priority: Priority,
        expires_at: Optional[datetime],
    ) -> Notice:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO notices(title, content, priority, expires_at) VALUES(%s,%s,%s,%s)",
                (title, content, priority.value, expires_at),
            )
            cur.execute(f"SELECT {_COLUMNS} FROM notices WHERE notice_id=%s", (int(cur.lastrowid),))
            return row_to_notice(fetchone(cur))
