import asyncio
import logging
from app.config import settings
from app.database.supabase_client import get_service_supabase
from app.modules.presence.service import PresenceService

logger = logging.getLogger(__name__)


async def sweep_stale_presence():
    """Mark users offline when their heartbeat has gone quiet."""
    try:
        service = PresenceService(get_service_supabase())
        stale = service.mark_stale_offline(settings.presence_timeout_seconds)
        if not stale:
            logger.debug("No stale presence rows found")
            return
        logger.info(f"Marked {len(stale)} user(s) offline after {settings.presence_timeout_seconds}s without heartbeat")
    except Exception as e:
        logger.error(f"Error in presence sweep: {str(e)}")


async def presence_sweeper_loop():
    """Background task that periodically sweeps stale presence"""
    while True:
        await sweep_stale_presence()
        await asyncio.sleep(settings.presence_sweep_interval_seconds)
