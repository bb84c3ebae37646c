from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Account
from .repository import AccountRepository


def _row_to_account(row: dict) -> Account:
    return Account(
        user_id=int(row["user_id"]),
        email=row["email"],
        password_hash=row["password_hash"],
        name=row["name"],
        roll_number=row["roll_number"],
        phone_number=row.get("phone_number"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLAccountRepository(AccountRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[Account]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, email, password_hash, name, roll_number, phone_number, is_active
                FROM accounts
                WHERE user_id=%s
                """,
                (int(user_id),),
            )
            row = fetchone(cur)
            return _row_to_account(row) if row else None

    def get_by_email(self, email: str) -> Optional[Account]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, email, password_hash, name, roll_number, phone_number, is_active
                FROM accounts
                WHERE email=%s
                """,
                (email,),
            )
            row = fetchone(cur)
            return _row_to_account(row) if row else None

    def create_account(
        self,
        *,
        email: str,
        password_hash: str,
        name: str,
        roll_number: str,
        phone_number: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO accounts(email, password_hash, name, roll_number, phone_number, is_active)
                VALUES(%s,%s,%s,%s,%s,1)
                """,
                (email, password_hash, name, roll_number, phone_number),
            )
            return int(cur.lastrowid)
