"""Periodic cleanup of expired links and orphaned tags.

The scheduler that drives these sweeps lives outside this package; it calls
`run_cleaning_job` on whatever timer it is configured with.
"""

import structlog

from link_shortener.core.exceptions import LinkShortenerError
from link_shortener.core.observability import record_cleanup_sweep
from link_shortener.repositories.base import LinkRepository
from link_shortener.services import link as link_service

logger = structlog.get_logger()


async def run_cleaning_job(repository: LinkRepository) -> bool:
    """Delete expired links, then the tags they left orphaned.

    A failing sweep is logged and does not stop the next one; the scheduler's
    next tick retries. Returns True when both sweeps succeeded.
    """
    logger.info("Executing cleaning job")
    succeeded = True

    try:
        await link_service.delete_expired_links(repository)
        record_cleanup_sweep("expired_links", success=True)
    except LinkShortenerError as e:
        logger.error("Failed to delete expired links", error=str(e))
        record_cleanup_sweep("expired_links", success=False)
        succeeded = False

    try:
        await link_service.delete_orphaned_tags(repository)
        record_cleanup_sweep("orphaned_tags", success=True)
    except LinkShortenerError as e:
        logger.error("Failed to delete orphaned tags", error=str(e))
        record_cleanup_sweep("orphaned_tags", success=False)
        succeeded = False

    return succeeded
