"""
Read-only snapshot of the enum catalogs used during one import run
"""

from types import MappingProxyType
from typing import Dict, Hashable, Mapping, Optional, Tuple

from models.base import CatalogCategory


def facility_key(power_type: str, power: float) -> Tuple[str, float]:
    """Compound catalog key of a charging facility"""
    return (power_type, float(power))


class CatalogSnapshot:
    """
    Immutable lookup of catalog ids per category.

    Keys are option names for every category except CHARGING_FACILITY,
    which is keyed by (power_type, power). Lookups are exact matches.
    """

    def __init__(self, entries: Dict[CatalogCategory, Dict[Hashable, int]]):
        self._entries = {
            category: MappingProxyType(dict(entries.get(category, {})))
            for category in CatalogCategory
        }

    def entries(self, category: CatalogCategory) -> Mapping[Hashable, int]:
        return self._entries[category]

    def resolve(self, category: CatalogCategory, key: Hashable) -> Optional[int]:
        if key is None:
            return None
        return self._entries[category].get(key)

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._entries.values())

    def __repr__(self) -> str:
        counts = ", ".join(f"{c.value}={len(e)}" for c, e in self._entries.items())
        return f"CatalogSnapshot({counts})"
