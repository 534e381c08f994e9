"""
Pydantic schemas for the flat rows written to the destination tables
"""

from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from datetime import datetime
from models.base import CatalogCategory, ImportStatus


class OperatorRow(BaseModel):
    """Operator or derived sub-operator (parent_id set, name empty)"""
    id: str = Field(..., min_length=1, max_length=20)
    name: Optional[str] = None
    parent_id: Optional[str] = None

    @property
    def is_sub_operator(self) -> bool:
        return self.parent_id is not None


class StationRow(BaseModel):
    """
    Flat station record as persisted in the stations table.

    operator_id always holds the corrected operator, i.e. the derived
    sub-operator where one applies.
    """
    id: str = Field(..., min_length=1, max_length=50)
    operator_id: str = Field(..., min_length=1, max_length=20)

    # Address
    country: Optional[str] = None
    city: Optional[str] = None
    street: Optional[str] = None
    postal_code: Optional[str] = None
    house_num: Optional[str] = None
    floor: Optional[str] = None
    region: Optional[str] = None
    timezone: Optional[str] = None

    # Geo
    longitude: Optional[float] = None
    latitude: Optional[float] = None
    entrance_longitude: Optional[float] = None
    entrance_latitude: Optional[float] = None

    max_capacity: Optional[int] = None
    accessibility_id: Optional[int] = None

    charging_station_id: Optional[str] = None
    charging_station_name: Optional[str] = None
    additional_info: Optional[str] = None

    is_open_24_hours: Optional[int] = None
    is_hubject_compatible: Optional[int] = None

    opening_time: Optional[str] = None
    dynamic_info_available: Optional[str] = None
    hotline_phone_num: Optional[str] = None
    hub_operator_id: Optional[str] = None
    clearinghouse_id: Optional[str] = None

    last_update: Optional[datetime] = None


class StationTranslationRow(BaseModel):
    """Per-language name / additional info of a station"""
    station_id: str
    language_code: str
    charging_station_name: Optional[str] = None
    additional_info: Optional[str] = None

    class Config:
        frozen = True


class StationRelationRow(BaseModel):
    """Join row between a station and one catalog entry of a category"""
    category: CatalogCategory
    station_id: str
    enum_id: int

    class Config:
        frozen = True

    def to_record(self, column: str) -> Dict[str, Any]:
        """Render as a row of the category's join table"""
        return {"station_id": self.station_id, column: self.enum_id}


class ImportReport(BaseModel):
    """Outcome of one import run"""
    status: ImportStatus = ImportStatus.RUNNING
    operators_loaded: int = 0
    sub_operators_derived: int = 0
    stations_loaded: int = 0
    translations_loaded: int = 0
    relations_loaded: Dict[str, int] = Field(default_factory=dict)
    unresolved_options: Dict[str, Dict[str, int]] = Field(default_factory=dict)
    language_fallbacks: Dict[str, str] = Field(default_factory=dict)

    started_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None
    duration_seconds: Optional[float] = None
    error_message: Optional[str] = None

    class Config:
        use_enum_values = True

    def complete(self, status: ImportStatus, error_message: Optional[str] = None):
        self.status = status
        self.completed_at = datetime.utcnow()
        self.duration_seconds = (self.completed_at - self.started_at).total_seconds()
        self.error_message = error_message
