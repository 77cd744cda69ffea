from unittest.mock import MagicMock

import pytest
import requests

from tenancy_service.app.core.exceptions import PaymentInitializationFailed, UpstreamUnavailable
from tenancy_service.app.crud.payments import payments_crud
from tenancy_service.app.services.gateway_verifier import GatewayVerifier
from tenancy_service.app.services.reconciliation_engine import ReconciliationEngine

from .conftest import FIXED_NOW


def _response(status_code=200, body=None, bad_json=False):
    response = MagicMock()
    response.status_code = status_code
    if bad_json:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = body or {}
    return response


@pytest.fixture
def session():
    mock = MagicMock(spec=requests.Session)
    mock.headers = {}
    return mock


@pytest.fixture
def verifier(session):
    return GatewayVerifier("https://api.paystack.test/", "sk_test_abc", timeout=5, session=session)


class TestVerify:

    def test_success_is_settled(self, verifier, session):
        session.request.return_value = _response(body={
            "status": True,
            "data": {"status": "success", "amount": 120000000, "gateway_response": "Approved"},
        })

        result = verifier.verify("RENT-abcde-1")

        assert result.settled is True
        assert result.raw_amount == 120000000
        session.request.assert_called_once_with(
            "GET", "https://api.paystack.test/transaction/verify/RENT-abcde-1", timeout=5)

    @pytest.mark.parametrize("status", ["failed", "abandoned", "reversed"])
    def test_anything_else_is_not_settled(self, verifier, session, status):
        session.request.return_value = _response(body={"status": True, "data": {"status": status}})

        assert verifier.verify("RENT-abcde-1").settled is False

    def test_sends_secret_key(self, verifier, session):
        assert session.headers["Authorization"] == "Bearer sk_test_abc"

    @pytest.mark.parametrize("status_code, body", [
        (400, {"status": False, "message": "Transaction reference not found"}),
        (401, {"status": False, "message": "Invalid key"}),
        (429, {"status": False, "message": "Too many requests"}),
    ])
    def test_client_errors_are_upstream_unavailable(self, verifier, session, status_code, body):
        session.request.return_value = _response(status_code, body)

        with pytest.raises(UpstreamUnavailable):
            verifier.verify("RENT-abcde-1")

    @pytest.mark.parametrize("body", [
        {"status": False, "message": "Invalid key"},
        {"status": True, "data": {}},
        {"status": True},
    ])
    def test_reply_without_verdict_is_upstream_unavailable(self, verifier, session, body):
        session.request.return_value = _response(body=body)

        with pytest.raises(UpstreamUnavailable):
            verifier.verify("RENT-abcde-1")

    @pytest.mark.parametrize("error", [
        requests.Timeout("slow"),
        requests.ConnectionError("down"),
        requests.RequestException("other"),
    ])
    def test_transport_errors_are_upstream_unavailable(self, verifier, session, error):
        session.request.side_effect = error

        with pytest.raises(UpstreamUnavailable) as exc:
            verifier.verify("RENT-abcde-1")
        assert exc.value.provider == "paystack"

    def test_server_error_is_upstream_unavailable(self, verifier, session):
        session.request.return_value = _response(502)

        with pytest.raises(UpstreamUnavailable):
            verifier.verify("RENT-abcde-1")

    def test_unreadable_body_is_upstream_unavailable(self, verifier, session):
        session.request.return_value = _response(bad_json=True)

        with pytest.raises(UpstreamUnavailable):
            verifier.verify("RENT-abcde-1")


class TestInitialize:

    def test_returns_authorization_url(self, verifier, session):
        session.request.return_value = _response(body={
            "status": True,
            "data": {"authorization_url": "https://checkout.paystack.test/xyz"},
        })

        url = verifier.initialize(
            "ada@example.com", 120000000, "RENT-abcde-1",
            metadata={"action": "NEW_LEASE"}, callback_url="https://app.test/payment/verify")

        assert url == "https://checkout.paystack.test/xyz"
        _, kwargs = session.request.call_args
        assert kwargs["json"] == {
            "email": "ada@example.com",
            "amount": 120000000,
            "currency": "NGN",
            "reference": "RENT-abcde-1",
            "metadata": {"action": "NEW_LEASE"},
            "callback_url": "https://app.test/payment/verify",
        }

    def test_rejection_raises(self, verifier, session):
        session.request.return_value = _response(
            body={"status": False, "message": "Invalid email"})

        with pytest.raises(PaymentInitializationFailed):
            verifier.initialize("ada@example.com", 100000, "RENT-abcde-2")

    def test_bad_key_is_upstream_unavailable(self, verifier, session):
        session.request.return_value = _response(401, {"status": False, "message": "Invalid key"})

        with pytest.raises(UpstreamUnavailable):
            verifier.initialize("ada@example.com", 100000, "RENT-abcde-3")


class TestSettlementAgainstGatewayErrors:

    @pytest.mark.parametrize("status_code", [401, 429])
    def test_payment_stays_pending_until_gateway_answers(
        self, db, verifier, session, vending, make_payment, unit, status_code
    ):
        engine = ReconciliationEngine(verifier, vending, clock=lambda: FIXED_NOW)
        payment = make_payment({
            "action": "NEW_LEASE", "targetUnitId": str(unit.id),
            "durationValue": 1, "durationUnit": "YEAR",
        })
        session.request.return_value = _response(
            status_code, {"status": False, "message": "Try again later"})

        with pytest.raises(UpstreamUnavailable):
            engine.settle(db, payment.reference)
        db.expire_all()
        assert payments_crud.find_by_reference(db, payment.reference).status == "pending"

        session.request.return_value = _response(body={
            "status": True, "data": {"status": "success", "amount": 120000000},
        })
        result = engine.settle(db, payment.reference)

        assert result.success is True
        assert payments_crud.find_by_reference(db, payment.reference).status == "paid"
