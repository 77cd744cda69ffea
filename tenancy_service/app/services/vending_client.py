import logging
from decimal import Decimal
from typing import Optional

import requests

from shared.core.config import settings
from ..core.exceptions import MeterVerificationFailed, UpstreamUnavailable, VendingFailed
from ..schemas.payments.payments_schemas import MerchantInfo, VendResult

logger = logging.getLogger(__name__)

PROVIDER = "vtpass"
SUCCESS_CODE = "000"
# Providers name the vended credential differently
TOKEN_KEYS = ("mainToken", "purchased_code", "token")


class VendingClient:
    """VTPass client for prepaid utility tokens."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        secret_key: str,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "api-key": api_key,
            "secret-key": secret_key,
            "Content-Type": "application/json",
        })

    @classmethod
    def from_settings(cls, cfg=settings) -> "VendingClient":
        return cls(cfg.VTPASS_BASE_URL, cfg.VTPASS_API_KEY,
                   cfg.VTPASS_SECRET_KEY, cfg.VTPASS_TIMEOUT)

    def _post(self, path: str, payload: dict) -> dict:
        try:
            response = self.session.post(
                f"{self.base_url}{path}", json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"VTPass POST {path} failed: {e}")
            raise UpstreamUnavailable(
                "Could not contact vending provider.", provider=PROVIDER) from e

        # business rejections come back as 200 with a non-"000" code
        if not 200 <= response.status_code < 300:
            logger.warning(f"VTPass POST {path} answered {response.status_code}")
            raise UpstreamUnavailable(
                "Could not contact vending provider.", provider=PROVIDER)

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamUnavailable(
                "Vending provider returned an unreadable response.", provider=PROVIDER) from e

    def verify_merchant(self, service_id: str, billers_code: str, type: Optional[str] = None) -> MerchantInfo:
        body = self._post("/merchant-verify", {
            "serviceID": service_id,
            "billersCode": billers_code,
            "type": type,
        })
        if body.get("code") != SUCCESS_CODE:
            logger.info(
                f"Meter {billers_code} rejected by {service_id}: {body.get('response_description')}")
            raise MeterVerificationFailed()

        content = body.get("content") or {}
        return MerchantInfo(
            customer_name=content.get("Customer_Name"),
            address=content.get("Address"),
        )

    def purchase(
        self,
        idempotency_key: str,
        service_id: str,
        meter_number: str,
        variation_type: Optional[str],
        amount: Decimal,
        phone: str,
    ) -> VendResult:
        """Buy a token. ``idempotency_key`` goes out as request_id so a retry
        after a timeout is deduplicated by the provider."""
        payload = {
            "request_id": idempotency_key,
            "serviceID": service_id,
            "billersCode": meter_number,
            "variation_code": variation_type,
            "amount": str(amount),
            "phone": phone,
        }
        logger.info(f"Calling VTPass /pay for {idempotency_key}")
        body = self._post("/pay", payload)

        if body.get("code") != SUCCESS_CODE:
            reason = body.get("response_description") or "Vending failed"
            raise VendingFailed(reason)

        token = next((body[k] for k in TOKEN_KEYS if body.get(k)), None)
        transactions = (body.get("content") or {}).get("transactions") or {}
        txn_id = transactions.get("transactionId")
        return VendResult(
            token=token,
            provider_transaction_id=str(txn_id) if txn_id is not None else None,
        )
