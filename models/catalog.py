from sqlalchemy import Column, Integer, String, Float, Index
from models.base import Base


class Accessibility(Base):
    __tablename__ = "accessibilities"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True)


class AuthenticationMode(Base):
    __tablename__ = "authentication_modes"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True)


class ChargingFacility(Base):
    """
    Charging facility catalog entry.

    Unlike the other catalogs a facility is identified by the pair
    (power_type, power); name is for display only.
    """
    __tablename__ = "charging_facilities"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    power_type = Column(String(20), nullable=False)
    power = Column(Float, nullable=False)

    __table_args__ = (
        Index("idx_charging_facility_key", "power_type", "power", unique=True),
    )


class ChargingMode(Base):
    __tablename__ = "charging_modes"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True)


class PaymentOption(Base):
    __tablename__ = "payment_options"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True)


class Plug(Base):
    __tablename__ = "plugs"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True)


class ValueAddedService(Base):
    __tablename__ = "value_added_services"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True)
