"""
Resolve free-text enum options of EVSE records to catalog join rows
"""

import logging
from collections import Counter
from typing import Callable, Dict, Hashable, Iterable, List

from models.base import CatalogCategory
from schemas.catalog import CatalogSnapshot, facility_key
from schemas.feed import EvseDataRecord
from schemas.normalized import StationRelationRow

logger = logging.getLogger(__name__)

# Catalog key of every option a record lists, per join-table category
OPTION_KEYS: Dict[CatalogCategory, Callable[[EvseDataRecord], Iterable[Hashable]]] = {
    CatalogCategory.AUTHENTICATION_MODE: lambda r: r.authentication_modes,
    CatalogCategory.CHARGING_FACILITY: lambda r: (
        facility_key(f.power_type, f.power) for f in r.charging_facilities
    ),
    CatalogCategory.CHARGING_MODE: lambda r: r.charging_modes,
    CatalogCategory.PAYMENT_OPTION: lambda r: r.payment_options,
    CatalogCategory.PLUG: lambda r: r.plugs,
    CatalogCategory.VALUE_ADDED_SERVICE: lambda r: r.value_added_services,
}


def _label(key: Hashable) -> str:
    if isinstance(key, tuple):
        return " ".join(str(part) for part in key)
    return str(key)


class EnumRelationResolver:
    """
    Connect EVSE records with the catalog entries named by their options.

    Each record lists option names instead of catalog ids, so every
    category is resolved by exact key match against the snapshot. Names
    without a catalog entry are dropped and counted in `unresolved`.
    """

    def __init__(self, catalog: CatalogSnapshot):
        self.catalog = catalog
        self.unresolved: Dict[CatalogCategory, Counter] = {}

    def resolve_category(
        self,
        category: CatalogCategory,
        records: List[EvseDataRecord]
    ) -> List[StationRelationRow]:
        option_keys = OPTION_KEYS[category]
        missing = Counter()
        rows = []

        for record in records:
            for key in option_keys(record):
                enum_id = self.catalog.resolve(category, key)
                if enum_id is None:
                    missing[_label(key)] += 1
                    continue
                rows.append(
                    StationRelationRow(category=category, station_id=record.evse_id, enum_id=enum_id)
                )

        if missing:
            self.unresolved[category] = missing
            logger.warning(
                f"{sum(missing.values())} {category.value} options without catalog entry: "
                f"{dict(missing)}"
            )

        return rows

    def resolve(self, records: List[EvseDataRecord]) -> Dict[CatalogCategory, List[StationRelationRow]]:
        """
        Returns:
            Join rows per category; categories without any match are omitted
        """
        relations = {}
        for category in OPTION_KEYS:
            rows = self.resolve_category(category, records)
            if rows:
                relations[category] = rows
        return relations
