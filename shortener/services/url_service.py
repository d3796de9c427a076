"""
URL Shortening Service

This service handles the core business logic for URL shortening:
- Issuing an identity and encoding it as a base62 short code
- Persisting the (code, destination) pair
- Looking up, describing and deleting links

Design Decisions:
- Counter-based: every link gets a fresh identity from the identity source,
  so codes are unique without any collision check
- Codes grow with the identity (1 char up to 61, 2 chars up to 3843, ...)
- URL validation happens before an identity is consumed
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from shortener.core.exceptions import InvalidURLError, PersistenceError
from shortener.core.validators import is_valid_url
from shortener.db.models import ShortURL
from shortener.db.repository import UrlRepository
from shortener.services.codec import encode_base62, is_valid_syntax
from shortener.services.identity_source import IdentitySource

logger = logging.getLogger(__name__)


class URLShorteningService:
    """
    Core business logic for URL shortening.

    Handles URL validation, code generation and database operations.
    Separated from API layer for testability and maintainability.
    """

    def __init__(self, session: AsyncSession, identity_source: Optional[IdentitySource] = None):
        """
        Initialize the URL shortening service.

        Args:
            session: Database session
            identity_source: Identity issuer (default: one bound to the same session)
        """
        self.session = session
        self.repository = UrlRepository(session)
        self.identity_source = identity_source or IdentitySource(session)

    async def create_short_url(self, original_url: str) -> ShortURL:
        """
        Create a new short URL.

        Args:
            original_url: The long URL to shorten

        Returns:
            ShortURL object as stored, with short_code populated

        Raises:
            InvalidURLError: If URL format is invalid
            PersistenceError: If the identity cannot be issued or the link cannot be stored
        """
        logger.info(f"Creating short URL for: {original_url}")

        if not is_valid_url(original_url):
            raise InvalidURLError(
                original_url,
                reason="Invalid URL format or potentially malicious URL"
            )

        identity = await self.identity_source.next_identity()
        short_code = encode_base62(identity)
        logger.info(f"Generated short code: {short_code} for ID: {identity}")

        try:
            short_url = await self.repository.create(identity, original_url, short_code)
            await self.repository.commit()
        except PersistenceError:
            await self.session.rollback()
            logger.error(
                f"Failed to create short URL for: {original_url} (identity {identity} skipped)",
                exc_info=True
            )
            raise

        logger.info(f"Successfully created short URL: {short_code}")
        return short_url

    async def get_url_info(self, short_code: str) -> Optional[ShortURL]:
        """
        Retrieve the full link record for a short code.

        Returns:
            ShortURL object if found, None otherwise (including malformed codes)
        """
        logger.info(f"Retrieving URL info for short code: {short_code}")

        if not is_valid_syntax(short_code):
            logger.warning(f"Invalid short code format: {short_code!r}")
            return None

        short_url = await self.repository.find_by_short_code(short_code)
        if short_url is None:
            logger.warning(f"Short code not found: {short_code}")
        return short_url

    async def find_original_url(self, short_code: str) -> Optional[str]:
        """Resolve a short code to its destination URL, or None if unknown."""
        logger.debug(f"Finding original URL for short code: {short_code}")
        return await self.repository.find_original_url_by_short_code(short_code)

    async def delete_url(self, short_code: str) -> bool:
        """
        Delete a link by its short code.

        Returns:
            True if a link was deleted, False if none matched

        Raises:
            PersistenceError: If the delete or its commit fails
        """
        logger.info(f"Deleting URL with short code: {short_code}")

        if not is_valid_syntax(short_code):
            logger.warning(f"Invalid short code format for deletion: {short_code!r}")
            return False

        deleted = await self.repository.delete_by_short_code(short_code)
        await self.repository.commit()

        if deleted:
            logger.info(f"Successfully deleted short code: {short_code}")
        else:
            logger.warning(f"Short code not found for deletion: {short_code}")
        return deleted

    async def record_click(self, short_code: str) -> bool:
        """
        Apply one click to a link (relative increment + last_clicked_at).

        Returns:
            True if the link existed, False otherwise

        Raises:
            PersistenceError: If the update or its commit fails
        """
        recorded = await self.repository.record_click(short_code)
        await self.repository.commit()
        return recorded
