from __future__ import annotations

import asyncio
import logging

from fantasy_cricket.core.config import get_settings
from fantasy_cricket.db.session import SessionLocal
from fantasy_cricket.services.auto_save import propagate_all

logger = logging.getLogger(__name__)


def run_auto_save_once() -> dict:
    with SessionLocal() as db:
        return propagate_all(db, apply=True)


async def _scheduler_loop(interval_seconds: int) -> None:
    while True:
        try:
            run_auto_save_once()
        except Exception:
            logger.exception("scheduler_loop_error")
        await asyncio.sleep(interval_seconds)


def start_scheduler() -> asyncio.Task | None:
    settings = get_settings()
    if not settings.SCHEDULER_ENABLED:
        return None
    interval = int(settings.SCHEDULER_INTERVAL_SECONDS)
    logger.info("auto_save_scheduler_started interval_seconds=%s", interval)
    return asyncio.create_task(_scheduler_loop(interval))
