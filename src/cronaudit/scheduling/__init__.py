"""Scheduling package public API.

- CronScheduler: binds ExecutionWrapper instances to APScheduler cron triggers.
"""

from .scheduler import CronScheduler, JobAlreadyRunningError

__all__ = ["CronScheduler", "JobAlreadyRunningError"]
