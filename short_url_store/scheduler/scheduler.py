"""Scheduler implementation for the short URL store.

This module provides a scheduler service that runs the expiration sweep
periodically using APScheduler.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from short_url_store.core.config import Settings, settings as default_settings
from short_url_store.services.cleanup import CleanupService

logger = logging.getLogger(__name__)

CLEANUP_JOB_ID = "cleanup_expired_urls"


class SchedulerService:
    """
    Scheduler service for managing background tasks.

    This service provides a wrapper around APScheduler to handle
    scheduling and execution of the expiration sweep.

    Args:
        cleanup_service: Sweep to run on every tick
        settings: Store settings holding the interval configuration
    """

    def __init__(self, cleanup_service: CleanupService, settings: Optional[Settings] = None):
        self.cleanup_service = cleanup_service
        self.settings = settings or default_settings
        self.scheduler: Optional[AsyncIOScheduler] = None
        self.is_running = False
        self.jobs: List[Dict[str, Any]] = []
        self.last_result: Optional[Dict[str, Any]] = None

    async def run_cleanup_job(self) -> Dict[str, Any]:
        """
        Job to cleanup expired URLs.

        Errors are logged and returned so the schedule keeps running.
        """
        logger.info("Starting scheduled cleanup of expired URLs")
        try:
            result = await self.cleanup_service.cleanup_expired_urls()
            logger.info(
                f"Scheduled cleanup completed: Processed={result.get('processed', 0)}, "
                f"Deleted={result.get('deleted', 0)}"
            )
        except Exception as e:
            logger.error(f"Error in scheduled URL cleanup job: {e}", exc_info=True)
            result = {
                "status": "error",
                "error": str(e),
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        self.last_result = result
        return result

    def initialize(self) -> None:
        """
        Initialize the scheduler.

        This sets up APScheduler with the job defaults, but does not start it yet.
        Must be called with a running event loop.
        """
        if self.scheduler:
            logger.warning("Scheduler already initialized")
            return

        self.scheduler = AsyncIOScheduler(
            job_defaults={
                "coalesce": True,  # Combine pending executions into one
                "max_instances": 1,  # Sweeps never overlap
            }
        )
        logger.info("Scheduler initialized successfully")

    def start(self) -> None:
        """
        Start the scheduler and register the cleanup job.
        """
        if not self.scheduler:
            self.initialize()

        if self.is_running:
            logger.warning("Scheduler already running")
            return

        interval = self.settings.CLEANUP_INTERVAL_SECONDS
        try:
            self.scheduler.add_job(
                self.run_cleanup_job,
                trigger=IntervalTrigger(seconds=interval, timezone="UTC"),
                id=CLEANUP_JOB_ID,
                name="Cleanup Expired URLs",
                replace_existing=True,
            )
            self.jobs.append({
                "id": CLEANUP_JOB_ID,
                "name": "Cleanup Expired URLs",
                "interval": f"{interval} seconds",
                "function": "run_cleanup_job",
            })

            if self.settings.CLEANUP_START_ON_STARTUP:
                logger.info("Running cleanup job on startup")
                self.scheduler.add_job(
                    self.run_cleanup_job,
                    id="cleanup_startup",
                    name="Startup Cleanup",
                    replace_existing=True,
                )

            self.scheduler.start()
            self.is_running = True
            logger.info(f"Scheduler started with {len(self.jobs)} jobs")
        except Exception as e:
            logger.error(f"Error starting scheduler: {e}", exc_info=True)
            self.is_running = False
            raise

    def shutdown(self) -> None:
        """
        Shutdown the scheduler gracefully.
        """
        if not self.scheduler or not self.is_running:
            logger.warning("Scheduler not running, nothing to shut down")
            return

        self.scheduler.shutdown(wait=False)
        self.is_running = False
        self.scheduler = None
        self.jobs = []
        logger.info("Scheduler shut down successfully")

    def get_status(self) -> Dict[str, Any]:
        """
        Get the current status of the scheduler.

        Returns:
            Dict with information about the scheduler status and jobs
        """
        job_details = []
        if self.scheduler and self.is_running:
            for job in self.scheduler.get_jobs():
                job_details.append({
                    "job_id": job.id,
                    "name": job.name,
                    "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
                })

        return {
            "running": self.is_running,
            "jobs": self.jobs,
            "scheduler_jobs_status": job_details,
            "last_result": self.last_result,
        }
