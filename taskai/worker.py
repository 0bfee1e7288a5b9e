from __future__ import annotations

import asyncio
import logging

from taskai.crud import expire_past_due
from taskai.db import SessionLocal, session_scope
from taskai.domain.dates import utcnow
from taskai.logging_utils import configure_logging
from taskai.settings import settings

logger = logging.getLogger("taskai_worker")


def run_once() -> int:
    with session_scope(SessionLocal) as db:
        expired = expire_past_due(db, utcnow())
    if expired:
        logger.info("Expired %s commitment(s): %s", len(expired), expired)
    return len(expired)


async def run_loop() -> None:
    configure_logging("taskai_worker")
    logger.info("Expiry worker started (interval=%ss)", settings.EXPIRY_SWEEP_INTERVAL_SEC)
    tick = 0
    while True:
        try:
            processed = run_once()
            tick += 1
            if tick % 12 == 0:
                logger.info("Expiry worker heartbeat (expired=%s)", processed)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Expiry worker error: %s", exc)
        await asyncio.sleep(settings.EXPIRY_SWEEP_INTERVAL_SEC)


def main() -> None:
    asyncio.run(run_loop())


if __name__ == "__main__":
    main()
