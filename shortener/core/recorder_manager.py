"""
Click Recorder Manager

This module manages the global click recorder instance.
The recorder is started once per application instance and shared across requests.

Design:
- One recorder per application instance, started on application startup
- Pending clicks are drained (with a timeout) on shutdown
- If startup fails the service keeps redirecting without recording clicks
"""

import logging
from typing import Optional

from shortener.core.setting import settings
from shortener.services.click_recorder import ClickRecorder

logger = logging.getLogger(__name__)

# Global recorder instance (initialized on startup)
_recorder: Optional[ClickRecorder] = None


def get_click_recorder() -> Optional[ClickRecorder]:
    """
    Get the global click recorder instance (FastAPI dependency).

    Returns:
        ClickRecorder if initialized, None otherwise
    """
    return _recorder


async def initialize_click_recorder() -> None:
    """Create and start the global click recorder."""
    global _recorder

    if _recorder is not None:
        logger.warning("Click recorder already initialized")
        return

    try:
        recorder = ClickRecorder(
            max_queue_size=settings.CLICK_QUEUE_SIZE,
            workers=settings.CLICK_WORKERS,
        )
        await recorder.start()
    except Exception as e:
        logger.error(f"Failed to initialize click recorder: {e}", exc_info=True)
        _recorder = None
        return

    _recorder = recorder
    logger.info(
        f"Click recorder initialized: "
        f"workers={settings.CLICK_WORKERS}, "
        f"queue_size={settings.CLICK_QUEUE_SIZE}"
    )


async def shutdown_click_recorder() -> None:
    """Drain pending clicks and stop the global click recorder."""
    global _recorder

    if _recorder is None:
        return

    logger.info("Shutting down click recorder")
    try:
        await _recorder.stop(timeout=settings.CLICK_DRAIN_TIMEOUT)
    finally:
        _recorder = None
