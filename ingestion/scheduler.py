import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from core.config import settings
from ingestion.catalog import CatalogLoader
from ingestion.extractors.feed_extractor import FeedExtractor
from ingestion.extractors.language_client import CountryLanguageClient
from ingestion.runner import ImportOrchestrator

logger = logging.getLogger(__name__)


class ImportScheduler:
    def __init__(self, feed_source: str = None):
        self.scheduler = AsyncIOScheduler()
        self.engine = create_async_engine(settings.DATABASE_URL, echo=False)
        self.SessionLocal = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )
        self.feed_extractor = FeedExtractor(feed_source)
        # Shared across jobs so catalogs and language codes are fetched once per process
        self.catalog_loader = CatalogLoader()
        self.language_client = CountryLanguageClient()

    async def run_import_job(self):
        """Job to fetch the feed and run a full import"""
        logger.info("Scheduler: Starting import job")
        async with self.SessionLocal() as session:
            try:
                feed = await self.feed_extractor.fetch()
                orchestrator = ImportOrchestrator(
                    session,
                    language_lookup=self.language_client,
                    catalog_loader=self.catalog_loader
                )
                report = await orchestrator.run(feed)
                logger.info(
                    f"Scheduler: Import job finished - "
                    f"{report.stations_loaded} stations in {report.duration_seconds:.2f}s"
                )

            except Exception as e:
                logger.error(f"Scheduler: Import job failed - {e}")

    def start(self):
        """Start the scheduler"""
        self.scheduler.add_job(
            self.run_import_job,
            trigger=IntervalTrigger(minutes=settings.IMPORT_INTERVAL_MINUTES),
            id="evse_import_job",
            replace_existing=True,
            max_instances=1
        )
        self.scheduler.start()
        logger.info("Import Scheduler started")

    def stop(self):
        self.scheduler.shutdown()
        logger.info("Import Scheduler stopped")
