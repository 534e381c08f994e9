"""
Map EVSE feed records to flat station rows
"""

import re
import logging
from collections import Counter
from typing import Any, Dict, List, Optional, Tuple

from models.base import CatalogCategory
from schemas.catalog import CatalogSnapshot
from schemas.feed import EvseDataRecord
from schemas.normalized import StationRow

logger = logging.getLogger(__name__)

# E 013° 22' 54.8"  /  N 52 31 12.5
DMS_PATTERN = re.compile(
    r"^\s*([NSEW])?\s*(-?\d+(?:\.\d+)?)\s*°?\s*(\d+(?:\.\d+)?)?\s*['′]?\s*(\d+(?:\.\d+)?)?\s*[\"″]?\s*([NSEW])?\s*$"
)


class StationMapper:
    """
    Map feed records to the stations table.

    Handles:
    - Address flattening
    - Geo coordinates in decimal, Google and degree-minute-second notation
    - Boolean strings stored as 1 / 0
    - Accessibility name -> catalog id
    """

    def __init__(self, catalog: CatalogSnapshot):
        self.catalog = catalog
        self.unresolved_accessibility = Counter()

    def map(self, record: EvseDataRecord) -> StationRow:
        longitude, latitude = self.parse_geo_coordinates(record.geo_coordinates)
        entrance_longitude, entrance_latitude = self.parse_geo_coordinates(
            record.geo_charging_point_entrance
        )
        address = record.address

        return StationRow(
            id=record.evse_id,
            operator_id=record.operator_id,
            country=address.country,
            city=address.city,
            street=address.street,
            postal_code=address.postal_code,
            house_num=address.house_num,
            floor=address.floor,
            region=address.region,
            timezone=address.timezone,
            longitude=longitude,
            latitude=latitude,
            entrance_longitude=entrance_longitude,
            entrance_latitude=entrance_latitude,
            max_capacity=record.max_capacity,
            accessibility_id=self._accessibility_id(record.accessibility),
            charging_station_id=record.charging_station_id,
            charging_station_name=record.charging_station_name,
            additional_info=record.additional_info,
            is_open_24_hours=self.parse_boolean_string(record.is_open_24_hours),
            is_hubject_compatible=self.parse_boolean_string(record.is_hubject_compatible),
            opening_time=record.opening_time,
            dynamic_info_available=record.dynamic_info_available,
            hotline_phone_num=record.hotline_phone_num,
            hub_operator_id=record.hub_operator_id,
            clearinghouse_id=record.clearinghouse_id,
            last_update=record.attributes.last_update,
        )

    def map_all(self, records: List[EvseDataRecord]) -> List[StationRow]:
        stations = [self.map(record) for record in records]
        if self.unresolved_accessibility:
            logger.warning(
                f"{sum(self.unresolved_accessibility.values())} accessibility values without catalog entry: "
                f"{dict(self.unresolved_accessibility)}"
            )
        return stations

    def _accessibility_id(self, name: Optional[str]) -> Optional[int]:
        if name is None:
            return None
        accessibility_id = self.catalog.resolve(CatalogCategory.ACCESSIBILITY, name)
        if accessibility_id is None:
            self.unresolved_accessibility[name] += 1
        return accessibility_id

    @staticmethod
    def parse_boolean_string(value: Optional[str]) -> Optional[int]:
        """'true' -> 1, 'false' -> 0, anything else -> None"""
        if value is None:
            return None
        value = value.strip().lower()
        if value == "true":
            return 1
        if value == "false":
            return 0
        return None

    @classmethod
    def parse_geo_coordinates(cls, geo: Optional[Dict[str, Any]]) -> Tuple[Optional[float], Optional[float]]:
        """
        Returns:
            (longitude, latitude); (None, None) when missing or unparseable
        """
        if not geo:
            return None, None

        if "DecimalDegree" in geo:
            point = geo["DecimalDegree"] or {}
            return cls._parse_float(point.get("Longitude")), cls._parse_float(point.get("Latitude"))

        if "Google" in geo:
            coordinates = (geo["Google"] or {}).get("Coordinates") or ""
            parts = coordinates.replace(",", " ").split()
            if len(parts) != 2:
                return None, None
            latitude, longitude = parts
            return cls._parse_float(longitude), cls._parse_float(latitude)

        if "DegreeMinuteSeconds" in geo:
            point = geo["DegreeMinuteSeconds"] or {}
            return cls._parse_dms(point.get("Longitude")), cls._parse_dms(point.get("Latitude"))

        # Already flat: {"Longitude": ..., "Latitude": ...}
        return cls._parse_float(geo.get("Longitude")), cls._parse_float(geo.get("Latitude"))

    @staticmethod
    def _parse_float(value: Any) -> Optional[float]:
        """Safely parse float value"""
        if value is None or value == "":
            return None
        try:
            return float(value)
        except (ValueError, TypeError):
            return None

    @staticmethod
    def _parse_dms(value: Any) -> Optional[float]:
        """Parse degree-minute-second notation to decimal degrees"""
        if not isinstance(value, str):
            return None
        match = DMS_PATTERN.match(value)
        if match is None:
            return None

        leading, degrees, minutes, seconds, trailing = match.groups()
        decimal = abs(float(degrees)) + float(minutes or 0) / 60 + float(seconds or 0) / 3600

        hemisphere = leading or trailing
        if hemisphere in ("S", "W") or degrees.startswith("-"):
            decimal = -decimal
        return round(decimal, 7)
