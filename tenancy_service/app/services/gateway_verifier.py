import logging
from typing import Optional

import requests

from shared.core.config import settings
from ..core.exceptions import PaymentInitializationFailed, UpstreamUnavailable
from ..schemas.payments.payments_schemas import GatewayVerification

logger = logging.getLogger(__name__)

PROVIDER = "paystack"
SUCCESS_STATUS = "success"


class GatewayVerifier:
    """Paystack client: confirms settlement of a transaction reference.

    Transport failures and any non-2xx reply surface as ``UpstreamUnavailable``
    so callers can retry. Only a declined or abandoned transaction, reported
    in a successful reply, is an ordinary result with ``settled=False``.
    """

    def __init__(
        self,
        base_url: str,
        secret_key: str,
        timeout: int = 10,
        currency: str = "NGN",
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.currency = currency
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {secret_key}",
            "Content-Type": "application/json",
        })

    @classmethod
    def from_settings(cls, cfg=settings) -> "GatewayVerifier":
        return cls(cfg.PAYSTACK_BASE_URL, cfg.PAYSTACK_SECRET_KEY,
                   cfg.PAYSTACK_TIMEOUT, cfg.PAYSTACK_CURRENCY)

    def _request(self, method: str, path: str, **kwargs) -> dict:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method, url, timeout=self.timeout, **kwargs)
        except (requests.Timeout, requests.ConnectionError) as e:
            logger.warning(f"Paystack {method} {path} failed: {e}")
            raise UpstreamUnavailable(provider=PROVIDER) from e
        except requests.RequestException as e:
            logger.warning(f"Paystack {method} {path} errored: {e}")
            raise UpstreamUnavailable(provider=PROVIDER) from e

        # A 401 after key rotation or a 429 says nothing about the transaction
        if not 200 <= response.status_code < 300:
            logger.warning(
                f"Paystack {method} {path} answered {response.status_code}")
            raise UpstreamUnavailable(provider=PROVIDER)

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamUnavailable(
                "Payment provider returned an unreadable response.", provider=PROVIDER) from e

    def verify(self, reference: str) -> GatewayVerification:
        body = self._request("GET", f"/transaction/verify/{reference}")
        data = body.get("data") or {}
        raw_status = data.get("status")
        # Only a verdict the gateway actually declared may fail a payment
        if body.get("status") is not True or not raw_status:
            logger.warning(
                f"Paystack gave no verdict for {reference}: {body.get('message')}")
            raise UpstreamUnavailable(
                "Payment provider did not report a transaction status.", provider=PROVIDER)

        result = GatewayVerification(
            settled=raw_status == SUCCESS_STATUS,
            raw_status=raw_status,
            raw_amount=data.get("amount"),
            gateway_response=data.get("gateway_response") or body.get("message"),
        )
        logger.info(
            f"Paystack verdict for {reference}: status={raw_status} settled={result.settled}")
        return result

    def initialize(
        self,
        email: str,
        amount_minor: int,
        reference: str,
        metadata: Optional[dict] = None,
        callback_url: Optional[str] = None,
    ) -> str:
        """Open a checkout for ``reference`` and return its authorization url."""
        payload = {
            "email": email,
            "amount": amount_minor,
            "currency": self.currency,
            "reference": reference,
            "metadata": metadata or {},
        }
        if callback_url:
            payload["callback_url"] = callback_url

        body = self._request("POST", "/transaction/initialize", json=payload)
        data = body.get("data") or {}
        if not body.get("status") or not data.get("authorization_url"):
            logger.error(
                f"Paystack init rejected for {reference}: {body.get('message')}")
            raise PaymentInitializationFailed()
        return data["authorization_url"]
