"""
URL Repository

The narrow persistence interface the services talk to:
create, resolve-by-code, record-click and delete-by-code.

Every SQLAlchemy failure is re-raised as PersistenceError so callers only
deal with the service's own error taxonomy. Transactions are committed by
the caller through commit().
"""

import logging
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.core.exceptions import PersistenceError
from shortener.db.models import ShortURL, utcnow

logger = logging.getLogger(__name__)


class UrlRepository:
    """Data access for the short_urls table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, identity: int, original_url: str, short_code: str) -> ShortURL:
        """
        Insert a new link and return it as stored.

        Raises:
            PersistenceError: If the insert fails (e.g. duplicate short code)
        """
        short_url = ShortURL(
            id=identity,
            original_url=original_url,
            short_code=short_code,
            click_count=0,
            created_at=utcnow(),
        )
        try:
            self.session.add(short_url)
            await self.session.flush()
            await self.session.refresh(short_url)
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Failed to create short URL '{short_code}': {e}",
                original_error=e
            )
        return short_url

    async def find_by_short_code(self, short_code: str) -> Optional[ShortURL]:
        try:
            # Counters change behind the session's back (background UPDATEs)
            statement = (
                select(ShortURL)
                .where(ShortURL.short_code == short_code)
                .execution_options(populate_existing=True)
            )
            result = await self.session.execute(statement)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to look up '{short_code}': {e}", original_error=e)

    async def find_original_url_by_short_code(self, short_code: str) -> Optional[str]:
        """Fetch only the destination column; this is the redirect hot path."""
        try:
            statement = select(ShortURL.original_url).where(ShortURL.short_code == short_code)
            result = await self.session.execute(statement)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to resolve '{short_code}': {e}", original_error=e)

    async def record_click(self, short_code: str) -> bool:
        """
        Increment the click counter and touch last_clicked_at.

        The increment is applied relative to the stored value inside a single
        UPDATE, so concurrent calls add up instead of overwriting each other.

        Returns:
            True if a row was updated, False if the code no longer exists
        """
        statement = (
            update(ShortURL)
            .where(ShortURL.short_code == short_code)
            .values(
                click_count=ShortURL.click_count + 1,
                last_clicked_at=utcnow(),
            )
        )
        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Failed to record click for '{short_code}': {e}",
                original_error=e
            )
        return result.rowcount > 0

    async def delete_by_short_code(self, short_code: str) -> bool:
        try:
            statement = delete(ShortURL).where(ShortURL.short_code == short_code)
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to delete '{short_code}': {e}", original_error=e)
        return result.rowcount > 0

    async def commit(self) -> None:
        """
        Commit the current transaction.

        Raises:
            PersistenceError: If the commit fails (e.g. "database is locked");
                the transaction is rolled back first
        """
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise PersistenceError(f"Failed to commit transaction: {e}", original_error=e)
