"""
Load the enum catalogs once per process
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.base import CatalogCategory
from models.catalog import (
    Accessibility,
    AuthenticationMode,
    ChargingFacility,
    ChargingMode,
    PaymentOption,
    Plug,
    ValueAddedService,
)
from schemas.catalog import CatalogSnapshot, facility_key
from core.exceptions import CatalogError

logger = logging.getLogger(__name__)

NAMED_CATALOGS = {
    CatalogCategory.ACCESSIBILITY: Accessibility,
    CatalogCategory.AUTHENTICATION_MODE: AuthenticationMode,
    CatalogCategory.CHARGING_MODE: ChargingMode,
    CatalogCategory.PAYMENT_OPTION: PaymentOption,
    CatalogCategory.PLUG: Plug,
    CatalogCategory.VALUE_ADDED_SERVICE: ValueAddedService,
}


class CatalogLoader:
    """
    Reads the seven catalog tables into a CatalogSnapshot.

    The snapshot is cached on the loader; keep one loader per process to
    hit the database only on the first run.
    """

    def __init__(self):
        self._snapshot: Optional[CatalogSnapshot] = None

    async def load(self, db: AsyncSession) -> CatalogSnapshot:
        if self._snapshot is not None:
            return self._snapshot

        try:
            entries = {}
            for category, model in NAMED_CATALOGS.items():
                result = await db.execute(select(model.id, model.name))
                entries[category] = {name: id_ for id_, name in result.all()}

            result = await db.execute(
                select(ChargingFacility.id, ChargingFacility.power_type, ChargingFacility.power)
            )
            entries[CatalogCategory.CHARGING_FACILITY] = {
                facility_key(power_type, power): id_
                for id_, power_type, power in result.all()
            }
        except Exception as e:
            raise CatalogError(
                "Failed to load enum catalogs",
                context={"operation": "SELECT"},
                original_exception=e
            )

        self._snapshot = CatalogSnapshot(entries)
        logger.info(f"Loaded enum catalogs: {self._snapshot!r}")
        return self._snapshot

    def invalidate(self):
        """Force the next load() to read the tables again"""
        self._snapshot = None
