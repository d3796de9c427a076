"""
Database module with abstraction layer.

This module provides:
- DatabaseAdapter interface: Abstract base class for database implementations
- SQLiteAdapter / PostgreSQLAdapter: dialect implementations
- UrlRepository: the narrow persistence interface used by the services
- Session management: Database session creation and management
"""

from shortener.db.interface import DatabaseAdapter
from shortener.db.repository import UrlRepository
from shortener.db.session import get_session, async_session_maker, engine, create_schema

__all__ = [
    "DatabaseAdapter",
    "UrlRepository",
    "get_session",
    "async_session_maker",
    "engine",
    "create_schema",
]
