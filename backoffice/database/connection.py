"""Database connection and transaction management with a query log."""
import sqlite3
import threading
from contextlib import contextmanager
import logging
from typing import List

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """Manages sqlite connections and records every statement they execute.

    The query log is what the performance log reports as "queries". It is
    kept per thread, since each request is served start to finish on one
    worker thread; the application flushes it at the start of each request.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._local = threading.local()
        self._is_configured = False

    def connect(self) -> sqlite3.Connection:
        """Get database connection with settings applied and tracing enabled."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        self._apply_sqlite_settings(conn)
        conn.set_trace_callback(self._record_query)
        return conn

    def _apply_sqlite_settings(self, conn: sqlite3.Connection):
        try:
            if not self._is_configured and self.db_path != ":memory:":
                conn.execute("PRAGMA journal_mode=WAL")
                self._is_configured = True

            conn.execute("PRAGMA busy_timeout=30000")
            conn.execute("PRAGMA foreign_keys=ON")
        except sqlite3.Error as e:
            logger.warning(f"Failed to apply SQLite settings: {e}")

    def _thread_query_log(self) -> List[str]:
        if not hasattr(self._local, "queries"):
            self._local.queries = []
        return self._local.queries

    def _record_query(self, statement: str) -> None:
        self._thread_query_log().append(statement)

    @contextmanager
    def transaction(self):
        """Context manager for database transactions."""
        conn = self.connect()
        try:
            conn.execute("BEGIN IMMEDIATE")
            yield conn
            conn.commit()
            logger.debug("Transaction committed successfully")
        except Exception as e:
            conn.rollback()
            logger.error(f"Transaction rolled back due to error: {e}")
            raise
        finally:
            conn.close()

    @contextmanager
    def connection(self):
        """Context manager for simple connection (no transaction)."""
        conn = self.connect()
        try:
            yield conn
        finally:
            conn.close()

    @property
    def query_log(self) -> List[str]:
        return list(self._thread_query_log())

    @property
    def query_count(self) -> int:
        return len(self._thread_query_log())

    def flush_query_log(self) -> None:
        """Start a fresh log for the calling thread."""
        self._local.queries = []
