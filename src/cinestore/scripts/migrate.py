"""Apply the bundled schema migrations to the configured database."""

import argparse
import asyncio
import logging

from cinestore.config import configure_logging
from cinestore.services.job_log import JobLogRecorder
from cinestore.services.migration_runner import MigrationRunner

logger = logging.getLogger(__name__)

JOB_NAME = "migrate"


async def migrate(stamp: list[int] | None = None, break_lock: bool = False) -> None:
    runner = MigrationRunner()

    if break_lock:
        if not await runner.break_lock():
            logger.info("No migration lock was held")

    if stamp:
        stamped = await runner.stamp(stamp)
        logger.info(f"Stamped {stamped or 'nothing'}")

    # A failure before the log table migration has run cannot be recorded
    recorder = JobLogRecorder()
    async with recorder.track(JOB_NAME):
        applied = await runner.apply()
    logger.info(f"Migration complete, applied {applied or 'nothing'}")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--stamp",
        type=int,
        nargs="+",
        metavar="ID",
        help="record these migration ids as applied without running them",
    )
    parser.add_argument(
        "--break-lock",
        action="store_true",
        help="remove a lock left behind by a crashed runner",
    )
    args = parser.parse_args()

    configure_logging()
    asyncio.run(migrate(stamp=args.stamp, break_lock=args.break_lock))


if __name__ == "__main__":
    main()
