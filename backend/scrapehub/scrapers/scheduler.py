"""Category scrape jobs and their APScheduler-based scheduler.

A job owns attempt counting and the execution time limit for one
category URL. Storage is streamed, so records stored by a failed or
timed-out attempt stay stored; the next attempt simply upserts again.
"""

import asyncio
import inspect
import traceback
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Awaitable, Callable, Optional, Union

import structlog
from apscheduler.job import Job
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_fixed,
)

from scrapehub.config import settings
from scrapehub.core.exceptions import JobTimeoutError, ScrapeHubException
from scrapehub.models.scrape_job import ScrapeJob
from scrapehub.scrapers.pipeline import CategoryPipeline, PipelineReport
from scrapehub.scrapers.registry import ScraperRegistry
from scrapehub.scrapers.utils.normalizer import url_digest
from scrapehub.services.product_service import ProductService

logger = structlog.get_logger(__name__)

FailureHook = Callable[[str, BaseException], Union[None, Awaitable[None]]]


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, ScrapeHubException):
        return exc.retryable
    return True


def log_permanent_failure(url: str, error: BaseException) -> None:
    """Default permanent-failure hook: log and take no further action."""
    logger.error(
        "category_job_failed_permanently",
        url=url,
        error=str(error),
        error_type=type(error).__name__,
        trace="".join(traceback.format_exception(type(error), error, error.__traceback__)),
    )


class CategoryScrapeJob:
    """Runs CategoryPipeline.scrape_category with job-level retry."""

    def __init__(
        self,
        url: str,
        registry: ScraperRegistry,
        session_factory: async_sessionmaker[AsyncSession],
        max_attempts: int = 3,
        timeout_seconds: float = 300.0,
        retry_delay_seconds: float = 5.0,
        on_permanent_failure: Optional[FailureHook] = None,
        record_runs: bool = True,
    ):
        """Initialize a category job.

        Args:
            url: Category page URL
            registry: Extractor registry
            session_factory: Async session factory for storage
            max_attempts: Total attempts before giving up
            timeout_seconds: Execution time limit per attempt
            retry_delay_seconds: Pause between attempts
            on_permanent_failure: Called with (url, error) once attempts
                are exhausted; may be a coroutine function
            record_runs: Persist a ScrapeJob row for this run
        """
        self.url = url
        self.registry = registry
        self.session_factory = session_factory
        self.max_attempts = max_attempts
        self.timeout_seconds = timeout_seconds
        self.retry_delay_seconds = retry_delay_seconds
        self.on_permanent_failure = on_permanent_failure or log_permanent_failure
        self.record_runs = record_runs
        self.attempts = 0
        self.logger = logger.bind(job="category_scrape", url=url)

    async def run(self) -> PipelineReport:
        """Execute the job.

        Returns:
            PipelineReport of the successful attempt

        Raises:
            The last attempt's error, after the failure hook has run
        """
        started = datetime.now(timezone.utc)
        job_id = await self._record_start(started)
        self.logger.info("category_job_started", max_attempts=self.max_attempts)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(max(1, self.max_attempts)),
            wait=wait_fixed(self.retry_delay_seconds),
            retry=retry_if_exception(_is_retryable),
            before_sleep=self._log_retry,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    self.attempts = attempt.retry_state.attempt_number
                    report = await self._run_attempt()
        except Exception as e:
            self.logger.error(
                "category_job_failed",
                attempts=self.attempts,
                error=str(e),
                exc_info=True,
            )
            await self._record_finish(job_id, started, error=e)
            await self._call_failure_hook(e)
            raise

        await self._record_finish(job_id, started, report=report)
        self.logger.info(
            "category_job_completed",
            attempts=self.attempts,
            total=report.total,
            succeeded=report.succeeded,
            failed=report.failed,
        )
        return report

    async def _run_attempt(self) -> PipelineReport:
        async with self.session_factory() as db:
            pipeline = CategoryPipeline(self.registry, ProductService(db))
            try:
                return await asyncio.wait_for(
                    pipeline.scrape_category(self.url),
                    timeout=self.timeout_seconds,
                )
            except asyncio.TimeoutError as e:
                raise JobTimeoutError(self.url, self.timeout_seconds) from e

    def _log_retry(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        self.logger.warning(
            "category_job_attempt_failed",
            attempt=retry_state.attempt_number,
            max_attempts=self.max_attempts,
            error=str(exc) if exc else None,
        )

    async def _call_failure_hook(self, error: BaseException) -> None:
        try:
            result = self.on_permanent_failure(self.url, error)
            if inspect.isawaitable(result):
                await result
        except Exception as hook_error:
            self.logger.error("failure_hook_raised", error=str(hook_error), exc_info=True)

    async def _record_start(self, started: datetime):
        if not self.record_runs:
            return None
        async with self.session_factory() as db:
            job_record = ScrapeJob(url=self.url, status="running", started_at=started)
            db.add(job_record)
            await db.commit()
            return job_record.id

    async def _record_finish(
        self,
        job_id,
        started: datetime,
        report: Optional[PipelineReport] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        if job_id is None:
            return
        end_time = datetime.now(timezone.utc)
        duration = (end_time - started).total_seconds()

        async with self.session_factory() as db:
            job_record = await db.get(ScrapeJob, job_id)
            if job_record is None:
                return
            job_record.attempts = self.attempts
            job_record.completed_at = end_time
            job_record.duration_seconds = Decimal(str(round(duration, 2)))
            if report is not None:
                job_record.status = "completed"
                job_record.items_found = report.total
                job_record.items_succeeded = report.succeeded
                job_record.items_failed = report.failed
            else:
                job_record.status = "failed"
                job_record.error_message = str(error)
                job_record.error_traceback = "".join(
                    traceback.format_exception(type(error), error, error.__traceback__)
                )
            await db.commit()


class ScraperScheduler:
    """Manages periodic category scrape jobs using APScheduler.

    Errors from a job never stop the scheduler; they are logged and the
    next interval runs as usual.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        registry: ScraperRegistry,
        on_permanent_failure: Optional[FailureHook] = None,
    ):
        """Initialize scraper scheduler.

        Args:
            session_factory: Async session factory for storage
            registry: Extractor registry shared by all jobs
            on_permanent_failure: Hook passed to every job
        """
        self.session_factory = session_factory
        self.registry = registry
        self.on_permanent_failure = on_permanent_failure
        self.scheduler = AsyncIOScheduler(timezone="UTC")
        self.logger = logger.bind(service="scraper_scheduler")
        self._job_ids = {}  # Map category url -> job_id

    def start(self) -> None:
        if not self.scheduler.running:
            self.scheduler.start()
            self.logger.info("scheduler_started")
        else:
            self.logger.warning("scheduler_already_running")

    def stop(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=True)
            self.logger.info("scheduler_stopped")
        else:
            self.logger.warning("scheduler_not_running")

    def load_default_jobs(self) -> int:
        """Schedule every configured category URL.

        Returns:
            Number of jobs scheduled
        """
        jobs_added = 0
        for idx, url in enumerate(settings.get_category_urls()):
            # Stagger by 30 seconds so categories don't all fire at once
            if self.add_category_job(
                url,
                interval_minutes=settings.SCHEDULE_INTERVAL_MINUTES,
                offset_seconds=idx * 30,
            ):
                jobs_added += 1

        self.logger.info("category_jobs_loaded", count=jobs_added)
        return jobs_added

    def add_category_job(
        self,
        url: str,
        interval_minutes: int = 15,
        offset_seconds: int = 0,
    ) -> Optional[Job]:
        """Add a periodic scraping job for a category URL.

        Args:
            url: Category page URL
            interval_minutes: How often to run the job
            offset_seconds: Initial delay before first run (for staggering)

        Returns:
            APScheduler Job instance or None if already scheduled
        """
        if url in self._job_ids:
            self.logger.warning("job_already_exists", url=url)
            return None

        start_date = datetime.now(timezone.utc) + timedelta(seconds=offset_seconds)
        trigger = IntervalTrigger(minutes=interval_minutes, start_date=start_date, timezone="UTC")

        job = self.scheduler.add_job(
            func=self._run_category_wrapper,
            trigger=trigger,
            args=[url],
            id=f"scrape_category_{url_digest(url)}",
            name=f"Scrape {url}",
            replace_existing=True,
            max_instances=1,  # Prevent concurrent runs of the same category
        )
        self._job_ids[url] = job.id

        self.logger.info(
            "category_job_added",
            url=url,
            interval_minutes=interval_minutes,
            offset_seconds=offset_seconds,
        )
        return job

    def remove_category_job(self, url: str) -> bool:
        job_id = self._job_ids.pop(url, None)
        if not job_id:
            self.logger.warning("job_not_found", url=url)
            return False
        self.scheduler.remove_job(job_id)
        self.logger.info("category_job_removed", url=url)
        return True

    def build_job(self, url: str) -> CategoryScrapeJob:
        return CategoryScrapeJob(
            url=url,
            registry=self.registry,
            session_factory=self.session_factory,
            max_attempts=settings.JOB_MAX_ATTEMPTS,
            timeout_seconds=settings.JOB_TIMEOUT_SECONDS,
            retry_delay_seconds=settings.JOB_RETRY_DELAY_SECONDS,
            on_permanent_failure=self.on_permanent_failure,
        )

    async def _run_category_wrapper(self, url: str) -> None:
        """Called by APScheduler; swallows errors so the scheduler keeps running."""
        try:
            await self.build_job(url).run()
        except Exception as e:
            self.logger.error("scrape_job_failed", url=url, error=str(e))

    def get_jobs_status(self) -> dict:
        """Get status of all scheduled jobs keyed by category URL."""
        jobs = {}
        for url, job_id in self._job_ids.items():
            job = self.scheduler.get_job(job_id)
            if job:
                next_run = getattr(job, "next_run_time", None)
                jobs[url] = {
                    "job_id": job_id,
                    "next_run": next_run.isoformat() if next_run else None,
                    "trigger": str(job.trigger),
                }
        return jobs

    def is_running(self) -> bool:
        return self.scheduler.running
