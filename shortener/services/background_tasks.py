"""
Background Task Helpers

Units of work executed off the request path. They create their own database
sessions because the endpoint's session is closed once the response is sent.
"""

import logging

from shortener.db.session import async_session_maker
from shortener.services.url_service import URLShorteningService

logger = logging.getLogger(__name__)


async def record_click_background(short_code: str) -> None:
    """
    Apply one click to a link in a dedicated session.

    Uses a database-level relative increment, so concurrent calls for the
    same code add up. Errors propagate to the caller (the click recorder),
    which logs them; nothing is retried.

    Args:
        short_code: The short code that was redirected
    """
    async with async_session_maker() as session:
        url_service = URLShorteningService(session)
        recorded = await url_service.record_click(short_code)

    if recorded:
        logger.info(f"Incremented clicks for {short_code}")
    else:
        # Link deleted between redirect and recording
        logger.warning(f"Click for {short_code} not recorded: link no longer exists")
