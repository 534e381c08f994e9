"""
Unit tests for operator resolution and station mapping
"""

import pytest
from datetime import datetime

from core.exceptions import MalformedIdentifierError
from ingestion.transformers.operator_resolver import (
    OperatorResolver,
    candidate_operator_id,
    flatten_operator_records,
)
from ingestion.transformers.station_mapper import StationMapper
from schemas.feed import EvseDataRecord, OperatorEvseData
from schemas.normalized import OperatorRow


class TestCandidateOperatorId:
    """Test operator id extraction from EVSE ids"""

    def test_alpha_operator_id(self):
        assert candidate_operator_id("DE*TBA*E1234") == "DE*TBA"

    def test_alpha_operator_id_without_separator(self):
        assert candidate_operator_id("DETBAE1234") == "DETBA"

    def test_numeric_operator_id(self):
        assert candidate_operator_id("+49*810*000*438") == "+49*810"

    def test_numeric_operator_id_without_plus(self):
        assert candidate_operator_id("49*810*000*438") == "49*810"

    @pytest.mark.parametrize("evse_id", ["12345", "", "**"])
    def test_malformed_id_raises(self, evse_id):
        with pytest.raises(MalformedIdentifierError) as exc_info:
            candidate_operator_id(evse_id)

        assert exc_info.value.context["evse_id"] == evse_id


class TestOperatorResolver:
    """Test sub-operator derivation"""

    def _records(self, make_record, operator_id, *evse_ids):
        operator = OperatorEvseData(
            operator_id=operator_id,
            operator_name="Test Betreiber A",
            evse_data_records=[make_record(evse_id) for evse_id in evse_ids],
        )
        return flatten_operator_records([operator])

    def test_flatten_stamps_nominal_operator(self, make_record):
        records = self._records(make_record, "DE*TBA", "DE*TBA*E1234", "DE*TBB*E5678")

        assert [r.operator_id for r in records] == ["DE*TBA", "DE*TBA"]

    def test_matching_operator_is_kept(self, make_record):
        records = self._records(make_record, "DE*TBA", "DE*TBA*E1234")
        operators = [OperatorRow(id="DE*TBA", name="Test Betreiber A")]

        resolved_operators, resolved = OperatorResolver().resolve(operators, records)

        assert resolved_operators == operators
        assert resolved[0].operator_id == "DE*TBA"

    def test_differing_operator_becomes_sub_operator(self, make_record):
        records = self._records(make_record, "DE*TBA", "DE*TBB*E5678")
        operators = [OperatorRow(id="DE*TBA", name="Test Betreiber A")]

        resolved_operators, resolved = OperatorResolver().resolve(operators, records)

        assert resolved_operators[-1] == OperatorRow(id="DE*TBB", name=None, parent_id="DE*TBA")
        assert resolved_operators[-1].is_sub_operator
        assert resolved[0].operator_id == "DE*TBB"
        assert resolved[0].evse_id == "DE*TBB*E5678"

    def test_input_records_are_not_modified(self, make_record):
        records = self._records(make_record, "DE*TBA", "DE*TBB*E5678")

        OperatorResolver().resolve([], records)

        assert records[0].operator_id == "DE*TBA"

    def test_duplicate_sub_operators_are_emitted(self, make_record):
        records = self._records(make_record, "DE*TBA", "DE*TBB*E0001", "DE*TBB*E0002")

        resolved_operators, _ = OperatorResolver().resolve([], records)

        assert [o.id for o in resolved_operators] == ["DE*TBB", "DE*TBB"]

    def test_malformed_id_aborts_resolution(self, make_record):
        records = self._records(make_record, "DE*TBA", "DE*TBA*E1234", "12345")

        with pytest.raises(MalformedIdentifierError):
            OperatorResolver().resolve([], records)


class TestStationMapper:
    """Test station row mapping"""

    def test_map_flattens_record(self, catalog, make_record):
        record = EvseDataRecord(**make_record("DE*TBA*E1234"))
        record = record.copy(update={"operator_id": "DE*TBA"})

        station = StationMapper(catalog).map(record)

        assert station.id == "DE*TBA*E1234"
        assert station.operator_id == "DE*TBA"
        assert station.country == "DEU"
        assert station.city == "Berlin"
        assert station.postal_code == "10115"
        assert station.longitude == pytest.approx(13.3818)
        assert station.latitude == pytest.approx(52.531)
        assert station.entrance_longitude is None
        assert station.max_capacity == 2
        assert station.accessibility_id == 1
        assert station.is_open_24_hours == 1
        assert station.is_hubject_compatible == 0
        assert station.dynamic_info_available == "auto"
        assert station.last_update == datetime(2016, 5, 10, 14, 30)

    def test_unknown_accessibility_is_counted(self, catalog, make_record):
        record = EvseDataRecord(**make_record("DE*TBA*E1234", Accessibility="Members only"))
        record = record.copy(update={"operator_id": "DE*TBA"})
        mapper = StationMapper(catalog)

        stations = mapper.map_all([record, record])

        assert stations[0].accessibility_id is None
        assert mapper.unresolved_accessibility["Members only"] == 2

    @pytest.mark.parametrize("value,expected", [
        ("true", 1),
        ("True", 1),
        ("false", 0),
        (" FALSE ", 0),
        ("yes", None),
        (None, None),
    ])
    def test_parse_boolean_string(self, value, expected):
        assert StationMapper.parse_boolean_string(value) == expected

    def test_parse_decimal_degree(self):
        geo = {"DecimalDegree": {"Longitude": "13.3818", "Latitude": "52.5310"}}

        assert StationMapper.parse_geo_coordinates(geo) == (13.3818, 52.531)

    def test_parse_google_coordinates(self):
        geo = {"Google": {"Coordinates": "52.5310 13.3818"}}

        assert StationMapper.parse_geo_coordinates(geo) == (13.3818, 52.531)

    def test_parse_degree_minute_seconds(self):
        geo = {
            "DegreeMinuteSeconds": {
                "Longitude": "E 013° 22' 54.8\"",
                "Latitude": "S 33° 52' 0\"",
            }
        }

        longitude, latitude = StationMapper.parse_geo_coordinates(geo)

        assert longitude == pytest.approx(13.3818889, abs=1e-6)
        assert latitude == pytest.approx(-33.8666667, abs=1e-6)

    @pytest.mark.parametrize("geo", [
        None,
        {},
        {"Google": {"Coordinates": "52.5310"}},
        {"DecimalDegree": {"Longitude": "east", "Latitude": ""}},
    ])
    def test_unparseable_coordinates(self, geo):
        assert StationMapper.parse_geo_coordinates(geo) == (None, None)
