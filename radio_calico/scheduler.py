"""
APScheduler wrapper for Radio Calico

Runs the now-playing metadata poll on a fixed interval in a background
thread. Simple wrapper around APScheduler, one job.
"""

import logging
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)


class RadioScheduler:
    """Background scheduler with a single interval job

    Attributes:
        scheduler: BackgroundScheduler instance
        interval_seconds: Seconds between runs
    """

    def __init__(self, poll_func, interval_seconds=10):
        """Initialize scheduler with the polling function

        Args:
            poll_func: Function to call on every run (should take no args)
            interval_seconds: Seconds between runs (default: 10)
        """
        self.scheduler = BackgroundScheduler()
        self.interval_seconds = interval_seconds
        self.poll_func = poll_func
        self.job_id = 'metadata_poll_job'

        self.scheduler.add_job(
            self._run_poll,
            IntervalTrigger(seconds=self.interval_seconds),
            id=self.job_id,
            name='Now Playing Metadata Poll',
            max_instances=1,
            coalesce=True
        )

    def _run_poll(self):
        """Run the poll function

        A failing poll must not kill the job, so every error is logged here.
        """
        try:
            self.poll_func()
        except Exception as e:
            logger.error(f"Error during metadata poll: {e}", exc_info=True)

    def start(self):
        """Start the scheduler thread

        Returns:
            True if started, False if already running
        """
        if self.scheduler.running:
            logger.info("Metadata poll already running")
            return False

        self.scheduler.start()
        logger.info(f"Scheduler started (interval: {self.interval_seconds} seconds)")
        return True

    def is_running(self):
        """Check if the poll job is scheduled

        Returns:
            True if the scheduler is running and the job has a next run time
        """
        if not self.scheduler.running:
            return False
        job = self.scheduler.get_job(self.job_id)
        return job is not None and job.next_run_time is not None

    def shutdown(self, wait=True):
        """Shutdown scheduler

        Args:
            wait: Wait for a running poll to complete (default: True)
        """
        if not self.scheduler.running:
            return
        logger.info("Shutting down scheduler...")
        self.scheduler.shutdown(wait=wait)
        logger.info("Scheduler shut down")
