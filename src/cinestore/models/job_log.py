"""Append-only job run log."""

from datetime import datetime

from sqlalchemy import DateTime, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from cinestore.models.base import Base


class JobLog(Base):
    """
    One row per completed job run.

    The table has no primary key; the mapper treats (jobname, run_dt) as the
    identity so rows can still be loaded through the ORM.
    """

    __tablename__ = "joblogs"

    jobname: Mapped[str] = mapped_column(Text, nullable=False)
    run_dt: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.current_timestamp(),
    )

    __mapper_args__ = {"primary_key": [jobname, run_dt]}

    def __repr__(self) -> str:
        return f"<JobLog(jobname={self.jobname!r}, run_dt={self.run_dt})>"
