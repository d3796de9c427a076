"""
Database Adapters

This module implements the DatabaseAdapter interface for SQLite and PostgreSQL.
All dialect-specific configuration and behavior is encapsulated here.

SQLite (default) is file-based and suits local development, testing and
single-instance deployments. It has no sequences, so identities come from an
AUTOINCREMENT table. PostgreSQL issues identities from a native sequence and
is the choice when several service instances share one database.
"""

from typing import Any
from sqlalchemy import insert, select
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import NullPool

from shortener.db.interface import DatabaseAdapter
from shortener.db.models import SHORT_URL_ID_SEQUENCE, LinkIdSequence, utcnow


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter implementation.

    SQLite uses file-based storage and has different characteristics than
    server-based databases like PostgreSQL.
    """

    def get_pool_class(self) -> type[NullPool]:
        """
        Get the connection pool class for SQLite.

        SQLite uses NullPool because the file-based database doesn't benefit
        from connection pooling and handles one writer at a time.

        Returns:
            NullPool class
        """
        return NullPool

    def get_connect_args(self) -> dict[str, Any]:
        """
        Get SQLite-specific connection arguments.

        The timeout lets concurrent click increments wait for the write lock
        instead of failing immediately with "database is locked".
        """
        return {
            "check_same_thread": False,
            "timeout": 30,
        }

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": False  # Set to True only for SQL debugging in development
        }

    async def next_identity(self, session: AsyncSession) -> int:
        """
        Issue an identity by inserting into the AUTOINCREMENT sequence table.

        SQLite never reuses AUTOINCREMENT ids, so a committed identity stays
        consumed even if the link using it is deleted or never created.
        """
        result = await session.execute(
            insert(LinkIdSequence.__table__).values(issued_at=utcnow())
        )
        return result.inserted_primary_key[0]

    def get_dialect_name(self) -> str:
        return "sqlite"


class PostgreSQLAdapter(DatabaseAdapter):
    """
    PostgreSQL database adapter implementation (asyncpg driver).

    Identities come from a native sequence, which is atomic and never
    rolls back: a value taken inside a failed transaction is skipped.
    """

    def get_pool_class(self) -> None:
        # Default async queue pool
        return None

    def get_connect_args(self) -> dict[str, Any]:
        return {}

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": False,
            "pool_size": 10,
            "max_overflow": 20,
            "pool_pre_ping": True,
        }

    async def next_identity(self, session: AsyncSession) -> int:
        result = await session.execute(select(SHORT_URL_ID_SEQUENCE.next_value()))
        return result.scalar_one()

    def get_dialect_name(self) -> str:
        return "postgresql"


def get_database_adapter(database_url: str) -> DatabaseAdapter:
    """
    Factory function to get the database adapter for a connection string.

    Args:
        database_url: SQLAlchemy URL, e.g. sqlite+aiosqlite:///./shortener.db

    Returns:
        DatabaseAdapter instance

    Raises:
        ValueError: If the database backend is not supported
    """
    backend = make_url(database_url).get_backend_name()
    if backend == "sqlite":
        return SQLiteAdapter()
    if backend == "postgresql":
        return PostgreSQLAdapter()
    raise ValueError(f"Unsupported database backend: {backend}")
