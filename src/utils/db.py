from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from psycopg2.pool import ThreadedConnectionPool

from src.utils.config import DBConfig, PoolConfig, load_db_config
from src.utils.logging import get_logger


logger = get_logger(component="db")


class Database:
    """
    Owns one psycopg2 connection pool.

    The pool is created lazily on first use so constructing a Database never
    touches the network. Callers borrow a connection per operation:

      with db.connection() as conn:
          ...
    """

    def __init__(self, config: DBConfig | None = None, pool: PoolConfig | None = None) -> None:
        self._config = config or load_db_config()
        self._pool_config = pool or PoolConfig(minconn=1, maxconn=5)
        self._pool: ThreadedConnectionPool | None = None

    def _get_pool(self) -> ThreadedConnectionPool:
        if self._pool is None:
            self._pool = ThreadedConnectionPool(
                minconn=self._pool_config.minconn,
                maxconn=self._pool_config.maxconn,
                dsn=self._config.dsn,
            )
            logger.info(
                "db_pool_opened",
                host=self._config.host,
                db=self._config.name,
                maxconn=self._pool_config.maxconn,
            )
        return self._pool

    def close(self) -> None:
        """Close every pooled connection (safe to call twice)."""
        if self._pool is not None:
            try:
                self._pool.closeall()
            finally:
                self._pool = None
                logger.info("db_pool_closed")

    @contextmanager
    def connection(self) -> Iterator[Any]:
        """
        Borrow a pooled connection. The caller commits; whatever is left
        uncommitted is rolled back before the connection goes back.
        """
        pool = self._get_pool()
        conn = pool.getconn()
        try:
            yield conn
        finally:
            try:
                conn.rollback()
            finally:
                pool.putconn(conn)

    @contextmanager
    def transaction(self) -> Iterator[Any]:
        """
        Borrow a pooled connection with a transaction scope.
        - Commits on success
        - Rolls back on exception
        """
        pool = self._get_pool()
        conn = pool.getconn()
        try:
            # psycopg2 default autocommit is False; enforce explicitly.
            conn.autocommit = False
            yield conn
            conn.commit()
        except Exception:
            try:
                conn.rollback()
            except Exception as e:  # rollback failure should be visible
                logger.warning("db_rollback_failed", err=str(e))
            raise
        finally:
            pool.putconn(conn)

    def ping(self) -> bool:
        with self.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                row = cur.fetchone()
        return bool(row and row[0] == 1)
