"""
N:M association tables between stations and the enum catalogs.

Each EVSE data record lists option names instead of catalog ids, so
every category is resolved like this:

    Station (1) --- (N) StationPlug (N) --- (1) Plug

Accessibility is the exception: it is single-valued and lives on the
station row itself.
"""

from sqlalchemy import Column, String, Integer, ForeignKey
from models.base import Base


def _station_fk():
    return Column(
        String(50),
        ForeignKey("stations.id", ondelete="CASCADE"),
        primary_key=True
    )


class StationAuthenticationMode(Base):
    __tablename__ = "station_authentication_modes"

    station_id = _station_fk()
    authentication_mode_id = Column(Integer, ForeignKey("authentication_modes.id"), primary_key=True)


class StationChargingFacility(Base):
    __tablename__ = "station_charging_facilities"

    station_id = _station_fk()
    charging_facility_id = Column(Integer, ForeignKey("charging_facilities.id"), primary_key=True)


class StationChargingMode(Base):
    __tablename__ = "station_charging_modes"

    station_id = _station_fk()
    charging_mode_id = Column(Integer, ForeignKey("charging_modes.id"), primary_key=True)


class StationPaymentOption(Base):
    __tablename__ = "station_payment_options"

    station_id = _station_fk()
    payment_option_id = Column(Integer, ForeignKey("payment_options.id"), primary_key=True)


class StationPlug(Base):
    __tablename__ = "station_plugs"

    station_id = _station_fk()
    plug_id = Column(Integer, ForeignKey("plugs.id"), primary_key=True)


class StationValueAddedService(Base):
    __tablename__ = "station_value_added_services"

    station_id = _station_fk()
    value_added_service_id = Column(Integer, ForeignKey("value_added_services.id"), primary_key=True)
