"""
Pytest fixtures for the tenancy settlement test suite.

Provides:
- A file-backed SQLite database per test (two sessions can race on it)
- Seeded tenants, units and leases
- In-memory gateway and vending fakes
- A reconciliation engine with a fixed clock
"""

import threading
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import tenancy_service.app.models  # noqa: F401
from shared.core.database import Base
from tenancy_service.app.core.exceptions import UpstreamUnavailable, VendingFailed
from tenancy_service.app.crud.payments import payments_crud
from tenancy_service.app.enum.payments_enum import PaymentType
from tenancy_service.app.models.leasing_tenants.leases import Lease
from tenancy_service.app.models.leasing_tenants.tenants import Tenant
from tenancy_service.app.models.space_sites.units import Unit
from tenancy_service.app.schemas.payments.payments_schemas import (
    GatewayVerification,
    MerchantInfo,
    VendResult,
)
from tenancy_service.app.services.reconciliation_engine import ReconciliationEngine

FIXED_NOW = datetime(2025, 1, 15, 9, 30, tzinfo=timezone.utc)
FIXED_TODAY = FIXED_NOW.date()


# =============================================================================
# Fakes for the external providers
# =============================================================================


class FakeGateway:
    """Gateway double: every reference settles unless told otherwise."""

    def __init__(self):
        self.verdicts: Dict[str, GatewayVerification] = {}
        self.unavailable = False
        self.verify_calls: List[str] = []
        self.initialized: List[dict] = []
        # optional hook run inside verify(), before the engine touches the DB
        self.on_verify = None
        self._lock = threading.Lock()

    def decline(self, reference: str, status: str = "failed"):
        self.verdicts[reference] = GatewayVerification(
            settled=False, raw_status=status)

    def settle_with_amount(self, reference: str, amount_minor: int):
        self.verdicts[reference] = GatewayVerification(
            settled=True, raw_status="success", raw_amount=amount_minor)

    def verify(self, reference: str) -> GatewayVerification:
        with self._lock:
            self.verify_calls.append(reference)
        if self.unavailable:
            raise UpstreamUnavailable(provider="paystack")
        if self.on_verify is not None:
            hook, self.on_verify = self.on_verify, None
            hook(reference)
        return self.verdicts.get(
            reference, GatewayVerification(settled=True, raw_status="success"))

    def initialize(self, email, amount_minor, reference, metadata=None, callback_url=None):
        self.initialized.append({
            "email": email,
            "amount_minor": amount_minor,
            "reference": reference,
            "metadata": metadata,
            "callback_url": callback_url,
        })
        return f"https://checkout.paystack.test/{reference}"


class FakeVending:
    def __init__(self):
        self.calls: List[dict] = []
        self.failure: Optional[str] = None
        self.unavailable = False
        self.token = "1234-5678-9012-3456"

    def purchase(self, idempotency_key, service_id, meter_number, variation_type, amount, phone):
        self.calls.append({
            "idempotency_key": idempotency_key,
            "service_id": service_id,
            "meter_number": meter_number,
            "variation_type": variation_type,
            "amount": amount,
            "phone": phone,
        })
        if self.unavailable:
            raise UpstreamUnavailable(provider="vtpass")
        if self.failure:
            raise VendingFailed(self.failure)
        return VendResult(token=self.token, provider_transaction_id="VT-0001")

    def verify_merchant(self, service_id, billers_code, type=None):
        return MerchantInfo(customer_name="ADA OBI", address="12 Marina Road")


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def db_engine(tmp_path):
    eng = create_engine(
        f"sqlite:///{tmp_path / 'tenancy_test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


# =============================================================================
# Seed data
# =============================================================================


@pytest.fixture
def tenant(db):
    obj = Tenant(name="Ada Obi", email="ada@example.com",
                 phone="08031234567", status="pending")
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@pytest.fixture
def second_tenant(db):
    obj = Tenant(name="Bola Ade", email="bola@example.com", status="pending")
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@pytest.fixture
def unit(db):
    obj = Unit(name="Unit A1", status="available")
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@pytest.fixture
def make_lease(db, tenant, unit):
    def _make(end_date: date, start_date: date = date(2019, 1, 1), status: str = "active"):
        lease = Lease(
            tenant_id=tenant.id,
            unit_id=unit.id,
            start_date=start_date,
            end_date=end_date,
            rent_amount=Decimal("1200000.00"),
            status=status,
        )
        db.add(lease)
        db.commit()
        db.refresh(lease)
        return lease
    return _make


@pytest.fixture
def make_payment(db, tenant):
    counter = {"n": 0}

    def _make(meta: dict, amount: Decimal = Decimal("1200000.00"), lease_id=None,
              type: PaymentType = PaymentType.rent, user_id=None, reference: Optional[str] = None):
        counter["n"] += 1
        return payments_crud.create_pending(
            db,
            user_id=user_id or tenant.id,
            amount=amount,
            reference=reference or f"REF-{counter['n']:04d}",
            type=type,
            meta=meta,
            lease_id=lease_id,
        )
    return _make


# =============================================================================
# Engine fixtures
# =============================================================================


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def vending():
    return FakeVending()


@pytest.fixture
def reconciliation(gateway, vending):
    return ReconciliationEngine(gateway, vending, clock=lambda: FIXED_NOW)
