"""
Background Jobs Module

Runs the loan housekeeping jobs on an APScheduler background scheduler:
the overdue check once a day and payment reminders every few hours.
"""

from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler

from .loans import LoanManager
from .config import PortalConfig, get_config
from .logging_config import get_logger, log_action


OVERDUE_JOB_ID = "mark_overdue_payments"
REMINDER_JOB_ID = "remind_upcoming_payments"


class LoanJobScheduler:
    """
    Schedules the overdue and reminder jobs for a LoanManager
    """

    def __init__(self, loan_manager: LoanManager, config: Optional[PortalConfig] = None):
        self.loan_manager = loan_manager
        self.config = config or get_config()
        self.scheduler = BackgroundScheduler(timezone="UTC")
        self.logger = get_logger("bank_portal.scheduler")

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def start(self) -> None:
        """Register the jobs and start the scheduler"""
        if self.scheduler.running:
            return

        self.scheduler.add_job(
            self._run_job(OVERDUE_JOB_ID, self.loan_manager.mark_overdue_payments),
            'cron',
            hour=self.config.overdue_check_hour,
            minute=self.config.overdue_check_minute,
            id=OVERDUE_JOB_ID,
            replace_existing=True
        )
        self.scheduler.add_job(
            self._run_job(REMINDER_JOB_ID, self.loan_manager.remind_upcoming_payments),
            'interval',
            hours=self.config.reminder_interval_hours,
            id=REMINDER_JOB_ID,
            replace_existing=True
        )
        self.scheduler.start()

        log_action(
            self.logger, "info", "Background scheduler started",
            action="scheduler_start",
            extra={
                "overdue_check": f"{self.config.overdue_check_hour:02d}:{self.config.overdue_check_minute:02d}",
                "reminder_interval_hours": self.config.reminder_interval_hours
            }
        )

    def shutdown(self) -> None:
        """Stop the scheduler without waiting for running jobs"""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            self.logger.info("Background scheduler stopped")

    def _run_job(self, job_id: str, job: Callable[[], int]) -> Callable[[], None]:
        def run() -> None:
            try:
                count = job()
            except Exception:
                self.logger.exception(f"Scheduled job {job_id} failed")
                return
            self.logger.info(f"Scheduled job {job_id} processed {count} payments")
        return run
