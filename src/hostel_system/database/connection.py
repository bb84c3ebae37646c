from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional

import mysql.connector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    charset: str = "utf8mb4"
    connection_timeout: int = 10

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "hostel_db")),
            charset=str(db_config.get("charset", "utf8mb4")),
            connection_timeout=int(db_config.get("connection_timeout", 10)),
        )

    def connect_kwargs(self, *, with_database: bool = True) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
            "charset": self.charset,
            "connection_timeout": self.connection_timeout,
        }
        if with_database:
            kwargs["database"] = self.database
        return kwargs


class DatabaseConnection:
    """Process-wide connection factory for the hostel database.

    Every repository call opens its own short-lived connection, so the
    worker threads used by bulk marking never share one.
    """

    _instance: Optional["DatabaseConnection"] = None
    _lock = threading.Lock()

    def __init__(self, config: DBConfig):
        self._config = config

    @property
    def config(self) -> DBConfig:
        return self._config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        with cls._lock:
            if cls._instance is None or cls._instance.config != config:
                if cls._instance is not None:
                    logger.info("Switching database target to %s@%s/%s", config.user, config.host, config.database)
                cls._instance = DatabaseConnection(config)
            return cls._instance

    def connect(self):
        return mysql.connector.connect(**self._config.connect_kwargs())
