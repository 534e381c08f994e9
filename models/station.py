from sqlalchemy import Column, String, Integer, Float, DateTime, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from models.base import Base


class Station(Base):
    """
    Flattened EVSE data record.

    Field Mapping Strategy (feed -> column):
    - EvseId -> id
    - Address.* -> country, city, street, postal_code, house_num, floor, region, timezone
    - GeoCoordinates -> longitude, latitude
    - GeoChargingPointEntrance -> entrance_longitude, entrance_latitude
    - Accessibility -> accessibility_id (catalog lookup by name)
    - IsOpen24Hours / IsHubjectCompatible -> 1 / 0 / NULL
    - attributes.lastUpdate -> last_update

    operator_id is the corrected operator: a derived sub-operator when the
    EVSE id names a different operator than the one that delivered it.
    """
    __tablename__ = "stations"

    id = Column(String(50), primary_key=True)
    operator_id = Column(
        String(20),
        ForeignKey("operators.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Address
    country = Column(String(3), nullable=True)
    city = Column(String(100), nullable=True)
    street = Column(String(255), nullable=True)
    postal_code = Column(String(20), nullable=True)
    house_num = Column(String(20), nullable=True)
    floor = Column(String(20), nullable=True)
    region = Column(String(100), nullable=True)
    timezone = Column(String(50), nullable=True)

    # Geo
    longitude = Column(Float, nullable=True)
    latitude = Column(Float, nullable=True)
    entrance_longitude = Column(Float, nullable=True)
    entrance_latitude = Column(Float, nullable=True)

    max_capacity = Column(Integer, nullable=True)
    accessibility_id = Column(Integer, ForeignKey("accessibilities.id"), nullable=True)

    charging_station_id = Column(String(50), nullable=True, index=True)
    charging_station_name = Column(String(255), nullable=True)
    additional_info = Column(Text, nullable=True)

    # Boolean-as-integer flags
    is_open_24_hours = Column(Integer, nullable=True)
    is_hubject_compatible = Column(Integer, nullable=True)

    opening_time = Column(String(255), nullable=True)
    dynamic_info_available = Column(String(10), nullable=True)
    hotline_phone_num = Column(String(50), nullable=True)

    hub_operator_id = Column(String(20), nullable=True)
    clearinghouse_id = Column(String(20), nullable=True)

    last_update = Column(DateTime, nullable=True)

    # Relationships
    operator = relationship("Operator", back_populates="stations")
    translations = relationship(
        "StationTranslation",
        back_populates="station",
        passive_deletes=True
    )

    __table_args__ = (
        Index("idx_station_operator_country", "operator_id", "country"),
    )


class StationTranslation(Base):
    """
    Localized name and additional info of a station, one row per language.

    Rows are extracted from the packed EnAdditionalInfo feed field and
    backfilled from ChargingStationName / EnChargingStationName.
    """
    __tablename__ = "station_translations"

    station_id = Column(
        String(50),
        ForeignKey("stations.id", ondelete="CASCADE"),
        primary_key=True
    )
    language_code = Column(String(10), primary_key=True)
    charging_station_name = Column(String(255), nullable=True)
    additional_info = Column(Text, nullable=True)

    station = relationship("Station", back_populates="translations")
