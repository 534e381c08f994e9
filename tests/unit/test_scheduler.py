import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from core.exceptions import FeedExtractionError
from ingestion.scheduler import ImportScheduler
from schemas.normalized import ImportReport


@pytest.mark.asyncio
async def test_scheduler_initialization():
    scheduler = ImportScheduler()
    assert scheduler.scheduler is not None
    assert scheduler.engine is not None
    assert scheduler.catalog_loader is not None


@pytest.mark.asyncio
async def test_scheduler_job_execution():
    with patch("ingestion.scheduler.ImportOrchestrator") as mock_orchestrator_cls:
        mock_orchestrator = AsyncMock()
        mock_orchestrator.run.return_value = ImportReport(stations_loaded=3, duration_seconds=0.5)
        mock_orchestrator_cls.return_value = mock_orchestrator

        # Mock database session
        mock_session = AsyncMock()
        mock_maker = MagicMock()
        mock_maker.return_value.__aenter__.return_value = mock_session

        scheduler = ImportScheduler()
        scheduler.SessionLocal = mock_maker
        scheduler.feed_extractor = AsyncMock()

        await scheduler.run_import_job()

        assert mock_orchestrator.run.called
        _, kwargs = mock_orchestrator_cls.call_args
        assert kwargs["catalog_loader"] is scheduler.catalog_loader
        assert kwargs["language_lookup"] is scheduler.language_client


@pytest.mark.asyncio
async def test_scheduler_job_survives_failure():
    with patch("ingestion.scheduler.ImportOrchestrator") as mock_orchestrator_cls:
        mock_maker = MagicMock()
        mock_maker.return_value.__aenter__.return_value = AsyncMock()

        scheduler = ImportScheduler()
        scheduler.SessionLocal = mock_maker
        scheduler.feed_extractor = AsyncMock()
        scheduler.feed_extractor.fetch.side_effect = FeedExtractionError("Feed file not found")

        await scheduler.run_import_job()

        mock_orchestrator_cls.assert_not_called()


def test_scheduler_start_registers_job():
    scheduler = ImportScheduler()
    scheduler.scheduler = MagicMock()

    scheduler.start()

    _, kwargs = scheduler.scheduler.add_job.call_args
    assert kwargs["id"] == "evse_import_job"
    assert kwargs["max_instances"] == 1
    scheduler.scheduler.start.assert_called_once()
