from functools import lru_cache

from fastapi import Depends

from shared.core.config import settings
from ..services.gateway_verifier import GatewayVerifier
from ..services.payment_initiation import PaymentInitiation
from ..services.reconciliation_engine import ReconciliationEngine
from ..services.vending_client import VendingClient


@lru_cache()
def get_gateway() -> GatewayVerifier:
    return GatewayVerifier.from_settings(settings)


@lru_cache()
def get_vending_client() -> VendingClient:
    return VendingClient.from_settings(settings)


def get_reconciliation_engine(
    gateway: GatewayVerifier = Depends(get_gateway),
    vending: VendingClient = Depends(get_vending_client),
) -> ReconciliationEngine:
    return ReconciliationEngine(
        gateway, vending, amount_tolerance=settings.SETTLEMENT_AMOUNT_TOLERANCE)


def get_payment_initiation(
    gateway: GatewayVerifier = Depends(get_gateway),
    vending: VendingClient = Depends(get_vending_client),
) -> PaymentInitiation:
    return PaymentInitiation.from_settings(gateway, vending, settings)
