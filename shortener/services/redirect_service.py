"""
Redirect Service

This service handles URL redirection logic.
Separated from URL service to keep the hot read path small.

Per request:
1. Reject malformed codes before touching storage (they were never issued)
2. Resolve the code to its destination
3. Hand the click to the click recorder without waiting, return the destination

The response never waits on click recording and is never affected by its
outcome; unknown and malformed codes record nothing.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from shortener.core.exceptions import InvalidCodeError, ShortCodeNotFoundError
from shortener.services.click_recorder import ClickRecorder
from shortener.services.codec import is_valid_syntax
from shortener.services.url_service import URLShorteningService

logger = logging.getLogger(__name__)


class RedirectService:
    """
    Service for handling URL redirections.

    Coordinates validation, resolution and the fire-and-forget click handoff
    for a single incoming code. Holds no state across requests.
    """

    def __init__(self, session: AsyncSession, click_recorder: Optional[ClickRecorder] = None):
        """
        Initialize the redirect service.

        Args:
            session: Async database session used for the lookup
            click_recorder: Background recorder receiving clicks (None disables recording)
        """
        self.session = session
        self.url_service = URLShorteningService(session)
        self.click_recorder = click_recorder

    async def redirect(self, short_code: str) -> str:
        """
        Resolve a short code for redirection and dispatch its click.

        Args:
            short_code: The short code from the request path

        Returns:
            The destination URL

        Raises:
            InvalidCodeError: If the code is empty or not base62
            ShortCodeNotFoundError: If no link has this code
            PersistenceError: If the lookup itself fails
        """
        logger.info(f"Redirecting short code: {short_code}")

        if not is_valid_syntax(short_code):
            logger.info(f"Invalid short code format for redirect: {short_code!r}")
            raise InvalidCodeError(short_code, reason="Invalid short code format for redirect")

        original_url = await self.url_service.find_original_url(short_code)
        if original_url is None:
            logger.warning(f"Short code not found: {short_code}")
            raise ShortCodeNotFoundError(short_code)

        self._dispatch_click(short_code)
        return original_url

    def _dispatch_click(self, short_code: str) -> None:
        if self.click_recorder is None:
            logger.warning(f"Click recorder unavailable, click for {short_code} not recorded")
            return
        self.click_recorder.submit(short_code)
