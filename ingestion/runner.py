# ============================================================================
# File: ingestion/runner.py
# Description: EVSE import orchestrator with transactional clear-and-replace
# ============================================================================
"""
Import Runner - Orchestrates the operator and station phases of an import.

This module provides the import orchestration with:
- Two atomic phases: operators first, then stations and everything
  derived from them
- Explicit persistence plans executed by a single transaction-scoped loader
- Detailed error context and logging
- Run report with row counts and unresolved option diagnostics
"""

from typing import Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from ingestion.catalog import CatalogLoader
from ingestion.extractors.language_client import LanguageLookup
from ingestion.loaders.postgres_loader import PostgresLoader, PersistenceOperation
from ingestion.transformers.enum_relations import EnumRelationResolver
from ingestion.transformers.localization import LocalizationExtractor
from ingestion.transformers.operator_resolver import OperatorResolver, flatten_operator_records
from ingestion.transformers.station_mapper import StationMapper
from models.base import CatalogCategory, ImportStatus
from models.operator import Operator
from models.station import Station, StationTranslation
from models.relations import (
    StationAuthenticationMode,
    StationChargingFacility,
    StationChargingMode,
    StationPaymentOption,
    StationPlug,
    StationValueAddedService,
)
from schemas.catalog import CatalogSnapshot
from schemas.feed import EvseDataRoot, OperatorEvseData
from schemas.normalized import ImportReport, OperatorRow, StationRelationRow
from core.exceptions import ImportException

logger = logging.getLogger(__name__)

# Join table and catalog id column per category
RELATION_TABLES = {
    CatalogCategory.AUTHENTICATION_MODE: (StationAuthenticationMode, "authentication_mode_id"),
    CatalogCategory.CHARGING_FACILITY: (StationChargingFacility, "charging_facility_id"),
    CatalogCategory.CHARGING_MODE: (StationChargingMode, "charging_mode_id"),
    CatalogCategory.PAYMENT_OPTION: (StationPaymentOption, "payment_option_id"),
    CatalogCategory.PLUG: (StationPlug, "plug_id"),
    CatalogCategory.VALUE_ADDED_SERVICE: (StationValueAddedService, "value_added_service_id"),
}

# Station-derived tables, children before parents
STATION_TABLES = [model for model, _ in RELATION_TABLES.values()] + [StationTranslation, Station]


class ImportOrchestrator:
    """
    EVSE import orchestrator

    Responsibilities:
    - Replace all operators with the feed's operators (operator phase)
    - Replace all stations, translations and join rows (station phase)
    - Derive sub-operators before stations reference them
    - Keep each phase all-or-nothing
    """

    def __init__(
        self,
        db_session: AsyncSession,
        language_lookup: LanguageLookup,
        catalog_loader: Optional[CatalogLoader] = None,
        loader: Optional[PostgresLoader] = None
    ):
        self.db = db_session
        self.language_lookup = language_lookup
        self.catalog_loader = catalog_loader or CatalogLoader()
        self.loader = loader or PostgresLoader(db_session)

    async def run(self, feed: EvseDataRoot) -> ImportReport:
        """
        Run a full import of a feed document.

        Pipeline phases:
        1. Catalogs - Load (or reuse) the enum catalog snapshot and derive
           the station plan (no writes yet)
        2. Operators - Clear and reload top-level operators
        3. Stations - Clear and reload stations with sub-operators,
           translations and enum relations

        Returns:
            ImportReport with row counts and diagnostics

        Raises:
            MalformedIdentifierError: If an EVSE id carries no operator id
            LoadError: If a phase could not be persisted (phase rolled back)
            ImportException: For other import errors
        """
        report = ImportReport()
        operator_data = feed.operators

        try:
            catalog = await self.catalog_loader.load(self.db)

            # Derive every station row up front; a malformed feed fails here,
            # before the operator clear cascades to the stored stations
            station_plan = await self.build_station_plan(operator_data, catalog, report)

            logger.info(f"Starting operator phase for {len(operator_data)} operators")
            await self.process_operator_data(operator_data, report)

            logger.info("Starting station phase")
            await self.execute_station_plan(station_plan, report)

        except ImportException as e:
            logger.error(
                f"Import failed: {e.message}",
                extra={"error_context": e.to_dict()}
            )
            await self.db.rollback()
            report.complete(ImportStatus.FAILED, error_message=e.message)
            raise

        except Exception as e:
            logger.exception("Unexpected error in import pipeline")
            await self.db.rollback()
            report.complete(ImportStatus.FAILED, error_message=str(e))

            raise ImportException(
                "Unexpected error in import pipeline",
                context={
                    "operators_loaded": report.operators_loaded,
                    "stations_loaded": report.stations_loaded
                },
                original_exception=e
            )

        report.complete(ImportStatus.SUCCESS)
        logger.info(
            f"Import completed in {report.duration_seconds:.2f}s - "
            f"Operators: {report.operators_loaded}, Sub-operators: {report.sub_operators_derived}, "
            f"Stations: {report.stations_loaded}, Translations: {report.translations_loaded}, "
            f"Relations: {report.relations_loaded}"
        )
        return report

    # --------------------------------------------------
    # OPERATOR PHASE
    # --------------------------------------------------

    @staticmethod
    def map_operator_data(operator_data: List[OperatorEvseData]) -> List[OperatorRow]:
        """Convert feed operator data to operator rows"""
        return [
            OperatorRow(id=data.operator_id, name=data.operator_name)
            for data in operator_data
        ]

    async def process_operator_data(self, operator_data: List[OperatorEvseData], report: ImportReport):
        """Clear all operators and store the feed's operators"""
        operators = self.map_operator_data(operator_data)

        plan = [PersistenceOperation.clear(Operator)]
        if operators:
            plan.append(PersistenceOperation.upsert(Operator, operators))

        loaded = await self.loader.execute(plan)
        report.operators_loaded = loaded.get(Operator.__tablename__, 0)

    # --------------------------------------------------
    # STATION PHASE
    # --------------------------------------------------

    async def build_station_plan(
        self,
        operator_data: List[OperatorEvseData],
        catalog: CatalogSnapshot,
        report: ImportReport
    ) -> List[PersistenceOperation]:
        """
        Derive every station-phase row and lay out the persistence plan.

        Plan order:
        1. Clear join tables, translations, stations
        2. Upsert derived sub-operators
        3. Upsert stations (with corrected operator ids)
        4. Upsert translations
        5. Upsert join rows of each category that resolved anything
        """
        records = flatten_operator_records(operator_data)
        logger.info(f"Retrieved {len(records)} EVSE records")

        operators, records = OperatorResolver().resolve(
            self.map_operator_data(operator_data), records
        )
        sub_operators = [operator for operator in operators if operator.is_sub_operator]
        report.sub_operators_derived = len({operator.id for operator in sub_operators})

        mapper = StationMapper(catalog)
        stations = mapper.map_all(records)

        # Translation and enum relations only read the resolved records
        localization = LocalizationExtractor(self.language_lookup)
        translations = await localization.extract(records)
        report.language_fallbacks = dict(localization.fallbacks)

        enum_resolver = EnumRelationResolver(catalog)
        relations = enum_resolver.resolve(records)

        unresolved = {
            category.value: dict(counts)
            for category, counts in enum_resolver.unresolved.items()
        }
        if mapper.unresolved_accessibility:
            unresolved[CatalogCategory.ACCESSIBILITY.value] = dict(mapper.unresolved_accessibility)
        report.unresolved_options = unresolved

        plan = [PersistenceOperation.clear(model) for model in STATION_TABLES]
        if sub_operators:
            plan.append(PersistenceOperation.upsert(Operator, sub_operators))
        if stations:
            plan.append(PersistenceOperation.upsert(Station, stations))
        if translations:
            plan.append(PersistenceOperation.upsert(StationTranslation, translations))
        plan.extend(self._relation_operations(relations))

        return plan

    @staticmethod
    def _relation_operations(
        relations: Dict[CatalogCategory, List[StationRelationRow]]
    ) -> List[PersistenceOperation]:
        operations = []
        for category, (model, column) in RELATION_TABLES.items():
            rows = relations.get(category)
            if not rows:
                continue
            operations.append(
                PersistenceOperation.upsert(model, [row.to_record(column) for row in rows])
            )
        return operations

    async def process_station_data(
        self,
        operator_data: List[OperatorEvseData],
        catalog: CatalogSnapshot,
        report: ImportReport
    ):
        """Replace all station data in a single transaction"""
        plan = await self.build_station_plan(operator_data, catalog, report)
        await self.execute_station_plan(plan, report)

    async def execute_station_plan(self, plan: List[PersistenceOperation], report: ImportReport):
        logger.info(f"Executing station plan: {plan}")

        loaded = await self.loader.execute(plan)

        report.stations_loaded = loaded.get(Station.__tablename__, 0)
        report.translations_loaded = loaded.get(StationTranslation.__tablename__, 0)
        report.relations_loaded = {
            model.__tablename__: loaded[model.__tablename__]
            for model, _ in RELATION_TABLES.values()
            if model.__tablename__ in loaded
        }
