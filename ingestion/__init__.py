"""
EVSE import pipeline components.

This package contains everything between the feed document and the
destination tables:

Modules:
    catalog: Loads the enum catalogs once per process
    runner: Import orchestrator (operator phase, station phase)
    scheduler: APScheduler integration for periodic imports

Subpackages:
    extractors: Feed document extractor, country -> language lookup client
    transformers: Operator resolution, station mapping, localization
        extraction, enum relation resolution
    loaders: Transaction-scoped executor for clear / upsert plans

Architecture:
    An import runs in two atomic phases:

    1. Operators - clear all operators, store the feed's operators
    2. Stations - clear stations and their derived rows, then store
       derived sub-operators, stations, translations and enum relations

    Sub-operators are stored before stations reference them; stations
    before translations and join rows reference them. A failure anywhere
    in the station phase rolls the whole phase back.

Usage:
    from ingestion.extractors.feed_extractor import FeedExtractor
    from ingestion.extractors.language_client import CountryLanguageClient
    from ingestion.runner import ImportOrchestrator

Example:
    feed = await FeedExtractor("data/evse_data.json").fetch()

    orchestrator = ImportOrchestrator(session, CountryLanguageClient())
    report = await orchestrator.run(feed)

    print(f"Loaded {report.stations_loaded} stations")

Error Handling:
    All components raise exceptions from core.exceptions. Language lookup
    failures are recovered locally; unresolved enum options are counted
    in the import report.
"""

__all__ = [
    "CatalogLoader",
    "ImportOrchestrator",
    "ImportScheduler",
    "FeedExtractor",
    "CountryLanguageClient",
    "OperatorResolver",
    "StationMapper",
    "LocalizationExtractor",
    "EnumRelationResolver",
    "PostgresLoader",
]
