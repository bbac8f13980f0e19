"""Scheduler module for the short URL store.

This module provides scheduled task functionality using APScheduler.
"""

from short_url_store.scheduler.scheduler import SchedulerService

__all__ = ["SchedulerService"]
