"""
SQLAlchemy ORM models for database tables.

This package defines the destination schema of the EVSE import:

Models:
    base: Base declarative class and shared enums (CatalogCategory, ImportStatus)
    operator: Operators and derived sub-operators (self-referential)
    station: Flattened EVSE records and their per-language translations
    catalog: Read-only enum catalogs (accessibility, plugs, ...)
    relations: Station <-> catalog association tables

Database Schema:
    All models inherit from the Base declarative class. Every table except
    the catalogs is cleared and rebuilt on each import run.

Usage:
    from models import Operator, Station, StationTranslation, Plug, StationPlug
    from models.base import CatalogCategory

Relationships:
    - Operator -> Operator (parent, for sub-operators)
    - Operator -> Station (one-to-many)
    - Station -> StationTranslation (one-to-many)
    - Station -> catalog entries (many-to-many through relations.*)
"""

from models.base import Base, CatalogCategory, ImportStatus
from models.operator import Operator
from models.station import Station, StationTranslation
from models.catalog import (
    Accessibility,
    AuthenticationMode,
    ChargingFacility,
    ChargingMode,
    PaymentOption,
    Plug,
    ValueAddedService,
)
from models.relations import (
    StationAuthenticationMode,
    StationChargingFacility,
    StationChargingMode,
    StationPaymentOption,
    StationPlug,
    StationValueAddedService,
)

__all__ = [
    "Base",
    "CatalogCategory",
    "ImportStatus",
    "Operator",
    "Station",
    "StationTranslation",
    "Accessibility",
    "AuthenticationMode",
    "ChargingFacility",
    "ChargingMode",
    "PaymentOption",
    "Plug",
    "ValueAddedService",
    "StationAuthenticationMode",
    "StationChargingFacility",
    "StationChargingMode",
    "StationPaymentOption",
    "StationPlug",
    "StationValueAddedService",
]
