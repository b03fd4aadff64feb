"""Background cleanup of expired approval codes."""
import asyncio
import logging

from .approval import ApprovalCodeStore

logger = logging.getLogger(__name__)

DEFAULT_SWEEP_INTERVAL_SECONDS = 600


async def run_sweeper(codes: ApprovalCodeStore, interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS) -> None:
    """Delete expired codes every ``interval_seconds`` until cancelled."""
    logger.info("Approval code sweeper started (every %ss)", interval_seconds)
    try:
        while True:
            await asyncio.sleep(interval_seconds)
            try:
                deleted = await codes.sweep()
            except Exception:
                logger.exception("Error while sweeping expired approval codes")
                continue
            if deleted:
                logger.info("Deleted %s expired approval codes", deleted)
    except asyncio.CancelledError:
        logger.info("Approval code sweeper stopped")
        raise
