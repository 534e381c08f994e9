"""
Pydantic schemas for the inbound EVSE feed document.

The feed is the JSON rendering of an OICP EvseData response:

    {"EvseData": {"OperatorEvseData": [
        {"OperatorID": "DE*TBA", "OperatorName": "...",
         "EvseDataRecord": [{"EvseId": "DE*TBA*E1234", ...}]}
    ]}}

Repeated elements may arrive either as a single object or as a list, and
option lists are wrapped in a container object ({"Plugs": {"Plug": [...]}}).
The validators below normalize both shapes to plain lists.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, validator


def as_list(value: Any) -> List[Any]:
    """Normalize a value-or-array element to a list"""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def unwrap_options(value: Any, key: str) -> List[Any]:
    """Unwrap {"Plug": [...]} style containers to a list"""
    if isinstance(value, dict):
        value = value.get(key)
    return as_list(value)


def as_optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class FeedModel(BaseModel):
    class Config:
        populate_by_name = True
        extra = "ignore"


class Address(FeedModel):
    country: Optional[str] = Field(None, alias="Country")
    city: Optional[str] = Field(None, alias="City")
    street: Optional[str] = Field(None, alias="Street")
    postal_code: Optional[str] = Field(None, alias="PostalCode")
    house_num: Optional[str] = Field(None, alias="HouseNum")
    floor: Optional[str] = Field(None, alias="Floor")
    region: Optional[str] = Field(None, alias="Region")
    timezone: Optional[str] = Field(None, alias="TimeZone")

    @validator(
        "country", "city", "street", "postal_code",
        "house_num", "floor", "region", "timezone",
        pre=True
    )
    def coerce_str(cls, v):
        return as_optional_str(v)


class ChargingFacilityOption(FeedModel):
    """A charging facility is identified by power type and power jointly"""
    power_type: str = Field(..., alias="PowerType")
    power: float = Field(..., alias="Power")
    voltage: Optional[float] = Field(None, alias="Voltage")
    amperage: Optional[float] = Field(None, alias="Amperage")


class RecordAttributes(FeedModel):
    last_update: Optional[datetime] = Field(None, alias="lastUpdate")


class EvseDataRecord(FeedModel):
    """Single charging point as delivered by the feed"""

    evse_id: str = Field(..., min_length=1, alias="EvseId")

    # Not part of the feed; set when records are pulled out of their operator
    operator_id: Optional[str] = None

    address: Address = Field(default_factory=Address, alias="Address")
    geo_coordinates: Optional[Dict[str, Any]] = Field(None, alias="GeoCoordinates")
    geo_charging_point_entrance: Optional[Dict[str, Any]] = Field(None, alias="GeoChargingPointEntrance")

    max_capacity: Optional[int] = Field(None, alias="MaxCapacity")
    accessibility: Optional[str] = Field(None, alias="Accessibility")

    charging_station_id: Optional[str] = Field(None, alias="ChargingStationId")
    charging_station_name: Optional[str] = Field(None, alias="ChargingStationName")
    en_charging_station_name: Optional[str] = Field(None, alias="EnChargingStationName")
    additional_info: Optional[str] = Field(None, alias="AdditionalInfo")
    en_additional_info: Optional[str] = Field(None, alias="EnAdditionalInfo")

    is_open_24_hours: Optional[str] = Field(None, alias="IsOpen24Hours")
    opening_time: Optional[str] = Field(None, alias="OpeningTime")
    hub_operator_id: Optional[str] = Field(None, alias="HubOperatorID")
    clearinghouse_id: Optional[str] = Field(None, alias="ClearinghouseID")
    is_hubject_compatible: Optional[str] = Field(None, alias="IsHubjectCompatible")
    dynamic_info_available: Optional[str] = Field(None, alias="DynamicInfoAvailable")
    hotline_phone_num: Optional[str] = Field(None, alias="HotlinePhoneNum")

    attributes: RecordAttributes = Field(default_factory=RecordAttributes)

    # Free-text enum option lists
    authentication_modes: List[str] = Field(default_factory=list, alias="AuthenticationModes")
    charging_facilities: List[ChargingFacilityOption] = Field(default_factory=list, alias="ChargingFacilities")
    charging_modes: List[str] = Field(default_factory=list, alias="ChargingModes")
    payment_options: List[str] = Field(default_factory=list, alias="PaymentOptions")
    plugs: List[str] = Field(default_factory=list, alias="Plugs")
    value_added_services: List[str] = Field(default_factory=list, alias="ValueAddedServices")

    @validator(
        "charging_station_id", "charging_station_name", "en_charging_station_name",
        "additional_info", "en_additional_info", "is_open_24_hours", "opening_time",
        "hub_operator_id", "clearinghouse_id", "is_hubject_compatible",
        "dynamic_info_available", "hotline_phone_num", "accessibility",
        pre=True
    )
    def coerce_str(cls, v):
        return as_optional_str(v)

    @validator("max_capacity", pre=True)
    def empty_capacity(cls, v):
        if v == "":
            return None
        return v

    @validator("address", "attributes", pre=True)
    def default_when_missing(cls, v):
        if v is None:
            return {}
        return v

    @validator("authentication_modes", pre=True)
    def unwrap_authentication_modes(cls, v):
        return unwrap_options(v, "AuthenticationMode")

    @validator("charging_facilities", pre=True)
    def unwrap_charging_facilities(cls, v):
        return unwrap_options(v, "ChargingFacility")

    @validator("charging_modes", pre=True)
    def unwrap_charging_modes(cls, v):
        return unwrap_options(v, "ChargingMode")

    @validator("payment_options", pre=True)
    def unwrap_payment_options(cls, v):
        return unwrap_options(v, "PaymentOption")

    @validator("plugs", pre=True)
    def unwrap_plugs(cls, v):
        return unwrap_options(v, "Plug")

    @validator("value_added_services", pre=True)
    def unwrap_value_added_services(cls, v):
        return unwrap_options(v, "ValueAddedService")


class OperatorEvseData(FeedModel):
    operator_id: str = Field(..., min_length=1, alias="OperatorID")
    operator_name: Optional[str] = Field(None, alias="OperatorName")
    evse_data_records: List[EvseDataRecord] = Field(default_factory=list, alias="EvseDataRecord")

    @validator("evse_data_records", pre=True)
    def normalize_records(cls, v):
        return as_list(v)


class EvseData(FeedModel):
    operator_evse_data: List[OperatorEvseData] = Field(default_factory=list, alias="OperatorEvseData")

    @validator("operator_evse_data", pre=True)
    def normalize_operators(cls, v):
        return as_list(v)


class EvseDataRoot(FeedModel):
    """Root of the feed document"""
    evse_data: EvseData = Field(default_factory=EvseData, alias="EvseData")

    @property
    def operators(self) -> List[OperatorEvseData]:
        return self.evse_data.operator_evse_data
