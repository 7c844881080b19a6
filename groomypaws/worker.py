"""
Background worker for automation runs and SLA evaluation.

Usage:
    python -m groomypaws.worker

Every poll it executes due workflow runs; SLA targets are evaluated on
their own, slower interval. Run it as a separate process next to the API.
"""

import asyncio
import logging
import time

from groomypaws.core.config import settings
from groomypaws.db.session import SessionLocal
from groomypaws.services import automation_service

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def run_automation_tick() -> int:
    """Execute one batch of due workflow runs in a fresh session."""
    with SessionLocal() as db:
        try:
            return automation_service.process_pending_runs(
                db, limit=settings.AUTOMATION_BATCH_SIZE
            )
        except Exception:
            db.rollback()
            logger.exception("Automation tick failed")
            return 0


def run_sla_tick() -> None:
    with SessionLocal() as db:
        try:
            automation_service.evaluate_sla_targets(db)
        except Exception:
            db.rollback()
            logger.exception("SLA evaluation failed")


async def worker_loop() -> None:
    """Main worker loop - poll for runs, evaluate SLAs when due."""
    logger.info(
        "Worker starting (poll interval: %ss, SLA interval: %ss, batch size: %s)",
        settings.AUTOMATION_POLL_INTERVAL_SECONDS,
        settings.SLA_EVALUATION_INTERVAL_SECONDS,
        settings.AUTOMATION_BATCH_SIZE,
    )
    last_sla_check = 0.0

    while True:
        processed = await asyncio.to_thread(run_automation_tick)
        if processed:
            logger.info("Processed %d workflow run(s)", processed)

        if time.monotonic() - last_sla_check >= settings.SLA_EVALUATION_INTERVAL_SECONDS:
            await asyncio.to_thread(run_sla_tick)
            last_sla_check = time.monotonic()

        await asyncio.sleep(settings.AUTOMATION_POLL_INTERVAL_SECONDS)


def main() -> None:
    try:
        asyncio.run(worker_loop())
    except KeyboardInterrupt:
        logger.info("Worker stopped")


if __name__ == "__main__":
    main()
