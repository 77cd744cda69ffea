import uuid
from decimal import Decimal

import pytest
from pydantic import ValidationError

from tenancy_service.app.core.exceptions import UnsupportedPaymentIntent
from tenancy_service.app.enum.leasing_tenants_enum import DurationUnit
from tenancy_service.app.schemas.payments.payments_schemas import (
    InitiateRentRequest,
    NewLeaseIntent,
    PurchaseUtilityRequest,
    RenewalIntent,
    UtilityIntent,
    parse_intent,
)


class TestParseIntent:

    def test_new_lease(self):
        unit_id = uuid.uuid4()
        intent = parse_intent({
            "action": "NEW_LEASE", "targetUnitId": str(unit_id),
            "durationValue": 6, "durationUnit": "month",
        })

        assert isinstance(intent, NewLeaseIntent)
        assert intent.target_unit_id == unit_id
        assert intent.duration_value == 6
        assert intent.duration_unit == DurationUnit.MONTH
        assert intent.requires_external_call is False

    @pytest.mark.parametrize("meta", [
        {"action": "RENT_RENEWAL"},
        {"action": "RENT_RENEWAL", "durationValue": None, "durationUnit": None},
        {"action": "RENT_RENEWAL", "durationValue": 0, "durationUnit": ""},
    ])
    def test_missing_duration_defaults_to_one_year(self, meta):
        intent = parse_intent(meta)

        assert isinstance(intent, RenewalIntent)
        assert (intent.duration_value, intent.duration_unit) == (1, DurationUnit.YEAR)

    def test_utility_requires_external_call(self):
        intent = parse_intent({
            "action": "UTILITY_PURCHASE", "serviceID": "ikeja-electric-prepaid",
            "meterNumber": "45011234567", "type": "prepaid", "phone": "08031234567",
            "custom_fields": [],
        })

        assert isinstance(intent, UtilityIntent)
        assert intent.requires_external_call is True
        assert intent.variation_type == "prepaid"

    @pytest.mark.parametrize("meta", [
        None,
        {},
        "NEW_LEASE",
        {"action": "REFUND"},
        {"action": "NEW_LEASE"},
        {"action": "UTILITY_PURCHASE", "serviceID": "ikeja-electric-prepaid"},
        {"action": "RENT_RENEWAL", "durationUnit": "WEEK"},
    ])
    def test_unusable_metadata_is_rejected(self, meta):
        with pytest.raises(UnsupportedPaymentIntent):
            parse_intent(meta)


def test_unknown_action_is_named():
    with pytest.raises(UnsupportedPaymentIntent) as exc:
        parse_intent({"action": "REFUND"})
    assert "REFUND" in exc.value.message


def test_metadata_round_trips_through_aliases():
    intent = UtilityIntent(
        service_id="abuja-water", meter_number="77001234", phone="08000000000")

    meta = intent.to_metadata()

    assert meta == {
        "action": "UTILITY_PURCHASE", "serviceID": "abuja-water",
        "meterNumber": "77001234", "phone": "08000000000",
    }
    assert parse_intent(meta) == intent


class TestRequests:

    def test_rent_amount_floor(self):
        with pytest.raises(ValidationError):
            InitiateRentRequest(amount=Decimal("999.99"))

    def test_rent_duration_must_be_positive(self):
        with pytest.raises(ValidationError):
            InitiateRentRequest(amount=Decimal("1000"), duration_value=0)

    def test_utility_amount_floor(self):
        with pytest.raises(ValidationError):
            PurchaseUtilityRequest(
                serviceID="ikeja-electric-prepaid", meterNumber="45011234567",
                amount=Decimal("499"))
