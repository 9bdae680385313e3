"""PostgreSQL-backed key-value store."""
import psycopg2
from psycopg2 import pool
from typing import Optional
import logging

from book_finder.errors import PersistenceError
from book_finder.store import KeyValueStore

logger = logging.getLogger(__name__)


class PostgresStore(KeyValueStore):
    """Key-value store on a PostgreSQL table with connection pooling."""

    def __init__(
        self,
        connection_string: Optional[str] = None,
        scope: str = "book-finder",
        min_conn: int = 1,
        max_conn: int = 5,
        connection_pool=None
    ):
        """
        Initialize database connection pool.

        Args:
            connection_string: PostgreSQL connection string
            scope: Key prefix for this application
            min_conn: Minimum connections in pool
            max_conn: Maximum connections in pool
            connection_pool: Existing pool to use instead of creating one
        """
        super().__init__(scope)

        if connection_pool is not None:
            self.connection_pool = connection_pool
            return

        try:
            self.connection_pool = psycopg2.pool.SimpleConnectionPool(
                min_conn,
                max_conn,
                connection_string
            )
        except psycopg2.Error as e:
            raise PersistenceError(f"Failed to create connection pool: {e}") from e

        logger.info("Database connection pool created successfully")

    def init_schema(self):
        """Create the key-value table if it doesn't exist."""
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute("""
                    CREATE TABLE IF NOT EXISTS kv_store (
                        key VARCHAR(512) PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                """)
                conn.commit()
                logger.info("Database schema initialized successfully")
        except psycopg2.Error as e:
            conn.rollback()
            raise PersistenceError(f"Failed to initialize schema: {e}") from e
        finally:
            self.connection_pool.putconn(conn)

    def _get(self, key: str) -> Optional[str]:
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute("SELECT value FROM kv_store WHERE key = %s", (key,))
                row = cur.fetchone()
                return row[0] if row else None
        except psycopg2.Error as e:
            raise PersistenceError(f"Failed to read {key}: {e}") from e
        finally:
            self.connection_pool.putconn(conn)

    def _set(self, key: str, value: str) -> None:
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute("""
                    INSERT INTO kv_store (key, value, updated_at)
                    VALUES (%s, %s, CURRENT_TIMESTAMP)
                    ON CONFLICT (key) DO UPDATE SET
                        value = EXCLUDED.value,
                        updated_at = CURRENT_TIMESTAMP
                """, (key, value))
                conn.commit()
                logger.info(f"Stored {key}")
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to store {key}: {e}")
            raise PersistenceError(f"Failed to write {key}: {e}") from e
        finally:
            self.connection_pool.putconn(conn)

    def close(self):
        """Close all connections in the pool."""
        if self.connection_pool:
            self.connection_pool.closeall()
            logger.info("Database connection pool closed")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
