"""
Pydantic schemas for data validation and serialization.

This package defines the data shapes flowing through the importer:

Schemas:
    feed: Inbound OICP-style EVSE feed document (operators and their records)
    normalized: Flat rows written to the destination tables and the run report
    catalog: Read-only snapshot of the enum catalogs

Usage:
    from schemas.feed import EvseDataRoot
    from schemas.normalized import StationRow, ImportReport
    from schemas.catalog import CatalogSnapshot

Example:
    feed = EvseDataRoot(**document)
    for operator in feed.operators:
        print(operator.operator_id, len(operator.evse_data_records))
"""

__all__ = [
    "EvseDataRoot",
    "OperatorEvseData",
    "EvseDataRecord",
    "OperatorRow",
    "StationRow",
    "StationTranslationRow",
    "StationRelationRow",
    "ImportReport",
    "CatalogSnapshot",
]
