"""
Script to run an EVSE import from the configured feed source, once or on a schedule
"""

import argparse
import asyncio
import sys
import logging

from core.database import engine, async_session_maker
from core.exceptions import ImportException
from core.logging import setup_logging
from ingestion.extractors.feed_extractor import FeedExtractor
from ingestion.extractors.language_client import CountryLanguageClient
from ingestion.runner import ImportOrchestrator
from ingestion.scheduler import ImportScheduler

logger = logging.getLogger(__name__)


async def run_import(feed_source: str = None, session_maker=async_session_maker) -> int:
    """Run one import; returns the process exit code"""
    try:
        feed = await FeedExtractor(feed_source).fetch()
        
        async with session_maker() as session:
            orchestrator = ImportOrchestrator(session, CountryLanguageClient())
            report = await orchestrator.run(feed)
        
        logger.info(
            f"Import completed: Operators={report.operators_loaded}, "
            f"Sub-operators={report.sub_operators_derived}, "
            f"Stations={report.stations_loaded}, "
            f"Translations={report.translations_loaded}"
        )
        if report.unresolved_options:
            logger.warning(f"Unresolved enum options: {report.unresolved_options}")
        return 0
            
    except ImportException as e:
        logger.error(f"Import failed: {e}")
        return 1


async def run_scheduled(feed_source: str = None):
    """Import now, then every IMPORT_INTERVAL_MINUTES until interrupted"""
    scheduler = ImportScheduler(feed_source)
    scheduler.start()
    try:
        await scheduler.run_import_job()
        await asyncio.Event().wait()
    finally:
        scheduler.stop()
        await scheduler.engine.dispose()


async def main(feed_source: str = None) -> int:
    try:
        return await run_import(feed_source)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Import an EVSE data feed")
    parser.add_argument("--feed", default=None, help="Feed file path or URL (default: FEED_SOURCE)")
    parser.add_argument("--schedule", action="store_true", help="Keep running and re-import periodically")
    args = parser.parse_args()
    
    setup_logging()
    if args.schedule:
        asyncio.run(run_scheduled(args.feed))
    else:
        sys.exit(asyncio.run(main(args.feed)))
