"""Job log recorder for run history and freshness checks."""

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cinestore import database
from cinestore.config import settings
from cinestore.database import run_with_timeout, storage_errors
from cinestore.errors import StorageError, ValidationError
from cinestore.models import JobLog
from cinestore.schemas.job_log import JobRun

logger = logging.getLogger(__name__)

FAILED_SUFFIX = ":failed"


def _as_utc(value: datetime) -> datetime:
    # SQLite keeps the wall-clock time only, so rows must share one offset to sort
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class JobLogRecorder:
    """
    Appends job runs to the joblogs table.

    Rows are only ever inserted. The table has no outcome column, so failed
    runs are recorded under "<jobname>:failed" and recent_runs(jobname)
    reports successful runs only.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self.session_factory = session_factory or database.AsyncSessionLocal

    async def record(
        self,
        jobname: str,
        *,
        run_dt: datetime | None = None,
        timeout: float | None = None,
    ) -> JobRun:
        """
        Record a run of a job.

        Args:
            jobname: Name of the job
            run_dt: Time of the run (defaults to now). Stored in UTC; naive
                values are taken to be UTC already
            timeout: Seconds before giving up (uses settings if not provided)

        Returns:
            The recorded run
        """
        if not jobname:
            raise ValidationError("jobname", jobname, "must not be empty")
        run = JobRun(jobname=jobname, run_dt=_as_utc(run_dt or datetime.now(timezone.utc)))

        async def write() -> None:
            async with self.session_factory() as session:
                async with session.begin():
                    await session.execute(
                        insert(JobLog).values(jobname=run.jobname, run_dt=run.run_dt)
                    )

        await self._run(write(), timeout, "record job run")
        logger.debug(f"Recorded run of {jobname} at {run.run_dt.isoformat()}")
        return run

    async def recent_runs(
        self,
        jobname: str,
        limit: int = 10,
        *,
        timeout: float | None = None,
    ) -> list[JobRun]:
        """Return the latest runs of a job, newest first."""
        if limit < 1:
            raise ValidationError("limit", limit, "must be positive")

        async def query() -> list[JobRun]:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(JobLog)
                    .where(JobLog.jobname == jobname)
                    .order_by(JobLog.run_dt.desc())
                    .limit(limit)
                )
                return [JobRun.model_validate(row) for row in result.scalars().all()]

        return await self._run(query(), timeout, "read job runs")

    @asynccontextmanager
    async def track(self, jobname: str) -> AsyncIterator[None]:
        """
        Wrap a job, recording its outcome when the block exits.

        Usage:
            async with recorder.track("daily-refresh"):
                await writer.upsert(records)
        """
        logger.info(f"Starting job {jobname}")
        started = time.monotonic()
        try:
            yield
        except Exception as e:
            elapsed = time.monotonic() - started
            logger.error(f"Job {jobname} failed after {elapsed:.1f}s: {e}")
            try:
                await self.record(jobname + FAILED_SUFFIX)
            except StorageError as record_error:
                logger.error(f"Could not record failed run of {jobname}: {record_error}")
            raise
        elapsed = time.monotonic() - started
        await self.record(jobname)
        logger.info(f"Job {jobname} finished in {elapsed:.1f}s")

    async def _run(self, coro, timeout: float | None, operation: str):
        if timeout is None:
            timeout = settings.query_timeout
        with storage_errors(operation):
            return await run_with_timeout(coro, timeout, operation)
