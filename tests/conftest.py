"""
Pytest configuration and fixtures
"""

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from typing import AsyncGenerator, Dict

from core.exceptions import ResourceNotFoundError
from ingestion.extractors.language_client import LanguageLookup
from models import (
    Base,
    CatalogCategory,
    Accessibility,
    AuthenticationMode,
    ChargingFacility,
    ChargingMode,
    PaymentOption,
    Plug,
    ValueAddedService,
)
from schemas.catalog import CatalogSnapshot, facility_key
from scripts.init_db import init_database

# In-memory database shared by every session of a test
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

CATALOG_ROWS = {
    Accessibility: [
        {"id": 1, "name": "Free publicly accessible"},
        {"id": 2, "name": "Restricted access"},
        {"id": 3, "name": "Paying publicly accessible"},
    ],
    AuthenticationMode: [
        {"id": 1, "name": "NFC RFID Classic"},
        {"id": 2, "name": "REMOTE"},
        {"id": 3, "name": "Direct Payment"},
    ],
    ChargingFacility: [
        {"id": 1, "name": "AC 11 kW", "power_type": "AC_3_PHASE", "power": 11.0},
        {"id": 2, "name": "AC 22 kW", "power_type": "AC_3_PHASE", "power": 22.0},
        {"id": 3, "name": "DC 50 kW", "power_type": "DC", "power": 50.0},
    ],
    ChargingMode: [
        {"id": 1, "name": "Mode_3"},
        {"id": 2, "name": "Mode_4"},
    ],
    PaymentOption: [
        {"id": 1, "name": "No Payment"},
        {"id": 2, "name": "Direct"},
        {"id": 3, "name": "Contract"},
    ],
    Plug: [
        {"id": 1, "name": "Type 2 Outlet"},
        {"id": 2, "name": "CCS Combo 2 Plug (Cable Attached)"},
        {"id": 3, "name": "CHAdeMO"},
    ],
    ValueAddedService: [
        {"id": 1, "name": "Reservation"},
        {"id": 2, "name": "DynamicPricing"},
    ],
}

LANGUAGES = {"DEU": "de", "GBR": "en", "FRA": "fr", "ITA": "it"}


class StubLanguageLookup(LanguageLookup):
    """In-memory country -> language table; unknown codes fail like a 404"""

    def __init__(self, languages: Dict[str, str] = None):
        self.languages = LANGUAGES if languages is None else languages
        self.calls = []

    async def get_language_code(self, country_code: str) -> str:
        self.calls.append(country_code)
        if country_code not in self.languages:
            raise ResourceNotFoundError(
                f"Unknown country code: {country_code}",
                context={"country_code": country_code}
            )
        return self.languages[country_code]


def build_catalog_snapshot() -> CatalogSnapshot:
    named = {
        CatalogCategory.ACCESSIBILITY: Accessibility,
        CatalogCategory.AUTHENTICATION_MODE: AuthenticationMode,
        CatalogCategory.CHARGING_MODE: ChargingMode,
        CatalogCategory.PAYMENT_OPTION: PaymentOption,
        CatalogCategory.PLUG: Plug,
        CatalogCategory.VALUE_ADDED_SERVICE: ValueAddedService,
    }
    entries = {
        category: {row["name"]: row["id"] for row in CATALOG_ROWS[model]}
        for category, model in named.items()
    }
    entries[CatalogCategory.CHARGING_FACILITY] = {
        facility_key(row["power_type"], row["power"]): row["id"]
        for row in CATALOG_ROWS[ChargingFacility]
    }
    return CatalogSnapshot(entries)


@pytest.fixture
def catalog() -> CatalogSnapshot:
    return build_catalog_snapshot()


@pytest.fixture
def language_lookup() -> StubLanguageLookup:
    return StubLanguageLookup()


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine with seeded catalogs"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Enforce foreign keys like PostgreSQL does
    @event.listens_for(engine.sync_engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    await init_database(engine)

    async with engine.begin() as conn:
        for model, rows in CATALOG_ROWS.items():
            await conn.execute(model.__table__.insert(), rows)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_maker(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for tests"""
    async with session_maker() as session:
        yield session
        await session.rollback()


def evse_record(evse_id: str, **overrides) -> dict:
    """Feed-shaped EVSE data record with sensible defaults"""
    record = {
        "EvseId": evse_id,
        "Address": {
            "Country": "DEU",
            "City": "Berlin",
            "Street": "Invalidenstrasse",
            "PostalCode": "10115",
            "HouseNum": "117",
        },
        "GeoCoordinates": {"DecimalDegree": {"Longitude": "13.3818", "Latitude": "52.5310"}},
        "MaxCapacity": 2,
        "Accessibility": "Free publicly accessible",
        "ChargingStationId": f"CS-{evse_id}",
        "ChargingStationName": "StationName-DE",
        "EnChargingStationName": "StationName-EN",
        "AdditionalInfo": "Zufahrt über Hof",
        "EnAdditionalInfo": "DEU:Inhalt|||GBR:Content|||FRA:Objet|||",
        "IsOpen24Hours": "true",
        "IsHubjectCompatible": "false",
        "DynamicInfoAvailable": "auto",
        "HotlinePhoneNum": "+498001234567",
        "attributes": {"lastUpdate": "2016-05-10T14:30:00"},
        "AuthenticationModes": {"AuthenticationMode": ["NFC RFID Classic", "REMOTE"]},
        "ChargingFacilities": {"ChargingFacility": [{"PowerType": "AC_3_PHASE", "Power": 22}]},
        "ChargingModes": {"ChargingMode": "Mode_3"},
        "PaymentOptions": {"PaymentOption": ["Contract"]},
        "Plugs": {"Plug": ["Type 2 Outlet"]},
        "ValueAddedServices": {"ValueAddedService": ["Reservation"]},
    }
    record.update(overrides)
    return record


@pytest.fixture
def feed_document():
    """Two operators; one TBA station belongs to the undeclared TBB sub-operator"""
    return {
        "EvseData": {
            "OperatorEvseData": [
                {
                    "OperatorID": "DE*TBA",
                    "OperatorName": "Test Betreiber A",
                    "EvseDataRecord": [
                        evse_record("DE*TBA*E1234"),
                        evse_record("DE*TBB*E5678", EnAdditionalInfo="DEU:Hinten|||"),
                    ],
                },
                {
                    "OperatorID": "+49*810",
                    "OperatorName": "Numeric Operator",
                    "EvseDataRecord": evse_record(
                        "+49*810*000*438",
                        EnAdditionalInfo=None,
                        EnChargingStationName=" ",
                        Plugs={"Plug": ["Unknown Plug"]},
                    ),
                },
            ]
        }
    }


@pytest.fixture
def make_record():
    """Factory for feed-shaped EVSE data records"""
    return evse_record


@pytest.fixture
def make_language_lookup():
    """Factory for language lookups with a custom country table"""
    return StubLanguageLookup
