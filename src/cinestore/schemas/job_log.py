"""Pydantic schemas for job log entries."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class JobRun(BaseModel):
    """A recorded job run."""

    model_config = ConfigDict(from_attributes=True)

    jobname: str
    run_dt: datetime
