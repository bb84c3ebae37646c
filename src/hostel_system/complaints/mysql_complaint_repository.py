from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import ComplaintCategory, ComplaintStatus, Priority
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Complaint
from .repository import ComplaintRepository

_COLUMNS = "complaint_id, user_id, title, description, category, status, priority, resolved_at, created_at"


def row_to_complaint(r: dict) -> Complaint:
    return Complaint(
        complaint_id=int(r["complaint_id"]),
        user_id=int(r["user_id"]),
        title=r["title"],
        description=r["description"],
        category=ComplaintCategory(r["category"]),
        status=ComplaintStatus(r["status"]),
        priority=Priority(r["priority"]),
        resolved_at=r.get("resolved_at"),
        created_at=r.get("created_at"),
    )


class MySQLComplaintRepository(ComplaintRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        user_id: int,
        title: str,
        description: str,
        category: ComplaintCategory,
        priority: Priority,
    ) -> Complaint:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO complaints(user_id, title, description, category, priority)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(user_id), title, description, category.value, priority.value),
            )
            cur.execute(f"SELECT {_COLUMNS} FROM complaints WHERE complaint_id=%s", (int(cur.lastrowid),))
            return row_to_complaint(fetchone(cur))

    def get_by_id(self, complaint_id: int) -> Optional[Complaint]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM complaints WHERE complaint_id=%s", (int(complaint_id),))
            r = fetchone(cur)
            return row_to_complaint(r) if r else None

    def list(self, *, user_id: Optional[int] = None) -> Sequence[Complaint]:
        with db_cursor(self._conn_factory) as (_, cur):
            if user_id is None:
                cur.execute(f"SELECT {_COLUMNS} FROM complaints ORDER BY created_at DESC, complaint_id DESC")
            else:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM complaints WHERE user_id=%s ORDER BY created_at DESC, complaint_id DESC",
                    (int(user_id),),
                )
            return [row_to_complaint(r) for r in fetchall(cur)]

    def update_status(
        self,
        complaint_id: int,
        *,
        status: ComplaintStatus,
        resolved_at: Optional[datetime],
    ) -> Optional[Complaint]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE complaints SET status=%s, resolved_at=%s WHERE complaint_id=%s",
                (status.value, resolved_at, int(complaint_id)),
            )
            cur.execute(f"SELECT {_COLUMNS} FROM complaints WHERE complaint_id=%s", (int(complaint_id),))
            r = fetchone(cur)
            return row_to_complaint(r) if r else None
