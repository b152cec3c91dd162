import logging
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from core.config import settings
from ingestion.periods import available_periods, select_period
from ingestion.runner import PipelineRunner

logger = logging.getLogger(__name__)


class ETLScheduler:
    def __init__(self, runner: Optional[PipelineRunner] = None, interval_hours: Optional[int] = None):
        self.scheduler = AsyncIOScheduler()
        self.runner = runner or PipelineRunner()
        self.interval_hours = interval_hours or settings.SCHEDULE_INTERVAL_HOURS

    async def run_etl_job(self):
        """Job to build the snapshot of the latest period"""
        logger.info("Scheduler: Starting snapshot job")
        try:
            period = select_period(available_periods(), -1)
            result = await self.runner.run(period)
            logger.info(
                f"Scheduler: Snapshot job completed for {result['period']} "
                f"({result['latest_prices']} latest prices)"
            )
        except Exception as e:
            logger.error(f"Scheduler: Snapshot job failed - {e}")

    def start(self):
        """Start the scheduler"""
        self.scheduler.add_job(
            self.run_etl_job,
            trigger=IntervalTrigger(hours=self.interval_hours),
            id="snapshot_job",
            replace_existing=True
        )
        self.scheduler.start()
        logger.info(f"ETL Scheduler started (every {self.interval_hours}h)")

    def stop(self):
        if self.scheduler.running:
            self.scheduler.shutdown()
        logger.info("ETL Scheduler stopped")
