from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, Iterator, Optional

import mysql.connector
from mysql.connector.constants import ClientFlag

logger = logging.getLogger(__name__)


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
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "hris_db")),
        )


class DatabaseConnection:
    """DB connection factory owned by the application container.

    Note: Outside a transaction every repository call gets a short-lived
    connection. Inside ``transaction()`` all calls share one connection and
    commit or roll back together.
    """

    def __init__(self, config: DBConfig):
        self._config = config
        self._active: ContextVar[Optional[Any]] = ContextVar(f"hris_tx_{id(self)}", default=None)

    def connect(self):
        return mysql.connector.connect(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
            autocommit=False,
            # Affected-row counts report changed rows, not matched rows.
            client_flags=[-ClientFlag.FOUND_ROWS],
        )

    @property
    def active_connection(self):
        return self._active.get()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._active.get() is not None:
            # Nested scopes join the outer transaction.
            yield
            return

        conn = self.connect()
        token = self._active.set(conn)
        try:
            conn.start_transaction()
            yield
            conn.commit()
        except Exception:
            logger.debug("Rolling back transaction", exc_info=True)
            conn.rollback()
            raise
        finally:
            self._active.reset(token)
            conn.close()
