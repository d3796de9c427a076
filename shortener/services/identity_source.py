"""
Identity Source

Issues unique, monotonically increasing link identities. Uniqueness under
concurrency and across instances is delegated to the database through the
dialect adapter (AUTOINCREMENT table on SQLite, a sequence on PostgreSQL).

An identity is committed as soon as it is issued. If the link insert that
follows fails, the identity is simply skipped: gaps are fine, duplicates are not.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.core.exceptions import PersistenceError
from shortener.db.interface import DatabaseAdapter
from shortener.db.session import db_adapter

logger = logging.getLogger(__name__)


class IdentitySource:
    """Hands out link identities using the configured database adapter."""

    def __init__(self, session: AsyncSession, adapter: Optional[DatabaseAdapter] = None):
        """
        Args:
            session: Database session used for issuance (committed per call)
            adapter: Dialect adapter (default: the one built for DATABASE_URL)
        """
        self.session = session
        self.adapter = adapter or db_adapter

    async def next_identity(self) -> int:
        """
        Issue the next identity.

        Raises:
            PersistenceError: If the database cannot issue an identity
        """
        try:
            identity = await self.adapter.next_identity(self.session)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Identity issuance failed: {e}", exc_info=True)
            raise PersistenceError(f"Failed to issue identity: {e}", original_error=e)

        if identity is None:
            raise PersistenceError("Identity source returned no value")

        logger.debug(f"Issued identity {identity}")
        return identity
