"""
Unit tests for feed document parsing
"""

import pytest
from datetime import datetime
from pydantic import ValidationError

from schemas.feed import EvseDataRecord, EvseDataRoot
from schemas.normalized import ImportReport
from models.base import ImportStatus


class TestFeedSchema:
    """Test normalization of value-or-list feed elements"""

    def test_single_operator_and_record(self, make_record):
        document = {
            "EvseData": {
                "OperatorEvseData": {
                    "OperatorID": "DE*TBA",
                    "EvseDataRecord": make_record("DE*TBA*E1234"),
                }
            }
        }

        feed = EvseDataRoot(**document)

        assert len(feed.operators) == 1
        assert feed.operators[0].operator_name is None
        assert feed.operators[0].evse_data_records[0].evse_id == "DE*TBA*E1234"

    def test_empty_document(self):
        assert EvseDataRoot(**{}).operators == []

    def test_option_containers_are_unwrapped(self, make_record):
        record = EvseDataRecord(**make_record("DE*TBA*E1234"))

        assert record.authentication_modes == ["NFC RFID Classic", "REMOTE"]
        assert record.charging_modes == ["Mode_3"]
        assert record.charging_facilities[0].power_type == "AC_3_PHASE"
        assert record.charging_facilities[0].power == 22.0

    def test_missing_options_default_to_empty(self, make_record):
        record = EvseDataRecord(**make_record("DE*TBA*E1234", Plugs=None, PaymentOptions={}))

        assert record.plugs == []
        assert record.payment_options == []

    def test_scalar_fields_are_coerced(self, make_record):
        record = EvseDataRecord(**make_record(
            "DE*TBA*E1234",
            IsOpen24Hours=True,
            IsHubjectCompatible=False,
            MaxCapacity="",
            Address={"Country": "DEU", "PostalCode": 10115},
        ))

        assert record.is_open_24_hours == "true"
        assert record.is_hubject_compatible == "false"
        assert record.max_capacity is None
        assert record.address.postal_code == "10115"
        assert record.attributes.last_update == datetime(2016, 5, 10, 14, 30)

    def test_missing_address_and_attributes(self, make_record):
        record = EvseDataRecord(**make_record("DE*TBA*E1234", Address=None, attributes=None))

        assert record.address.country is None
        assert record.attributes.last_update is None

    def test_evse_id_is_required(self, make_record):
        with pytest.raises(ValidationError):
            EvseDataRecord(**make_record(""))


class TestImportReport:
    """Test import report bookkeeping"""

    def test_complete(self):
        report = ImportReport()
        assert report.status == ImportStatus.RUNNING

        report.complete(ImportStatus.FAILED, error_message="Bulk upsert failed")

        assert report.status == ImportStatus.FAILED
        assert report.error_message == "Bulk upsert failed"
        assert report.duration_seconds >= 0
