"""Shared fixtures for the SPST test suite."""

import uuid
from datetime import date
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model


# ═══════════════════════════════════════════════════════════════════════════════
# FIXTURES — actors
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.fixture
def api_client():
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def client_for():
    """APIClient already authenticated as the given user (None = anonymous)."""
    from rest_framework.test import APIClient

    def _client(user=None):
        client = APIClient()
        if user is not None:
            client.force_authenticate(user=user)
        return client
    return _client


@pytest.fixture
def make_user(db):
    def _make(email=None, **kwargs):
        email = email or f"user-{uuid.uuid4().hex[:8]}@example.com"
        return get_user_model().objects.create_user(
            email=email, password="Test@1234",
            full_name=kwargs.get("full_name", "Test User"),
        )
    return _make


@pytest.fixture
def customer(make_user):
    return make_user(email="cantina@example.com", full_name="Cantina Rossi")


@pytest.fixture
def other_customer(make_user):
    return make_user(email="altro@example.com", full_name="Altro Cliente")


@pytest.fixture
def staff(make_user):
    from apps.authentication.models import StaffUser
    user = make_user(email="operatore@spst.it", full_name="Operatore SPST")
    StaffUser.objects.create(user=user, role=StaffUser.Role.OPERATOR)
    return user


@pytest.fixture
def break_glass(make_user):
    return make_user(email="info@spst.it", full_name="SPST Info")


@pytest.fixture
def carrier_a(db):
    from apps.pallets.models import Carrier
    return Carrier.objects.create(name="BRT")


@pytest.fixture
def carrier_b(db):
    from apps.pallets.models import Carrier
    return Carrier.objects.create(name="GLS")


@pytest.fixture
def make_carrier_user(make_user):
    def _make(carrier, email=None, enabled=True):
        from apps.pallets.models import CarrierUser
        user = make_user(email=email)
        CarrierUser.objects.create(user=user, carrier=carrier, enabled=enabled)
        return user
    return _make


@pytest.fixture
def carrier_user_a(make_carrier_user, carrier_a):
    return make_carrier_user(carrier_a, email="autista@brt.example.com")


@pytest.fixture
def carrier_user_b(make_carrier_user, carrier_b):
    return make_carrier_user(carrier_b, email="autista@gls.example.com")


# ═══════════════════════════════════════════════════════════════════════════════
# FIXTURES — shipments and waves
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.fixture
def make_shipment(db):
    from apps.shipments.models import Shipment
    counter = {"n": 0}

    def _make(email="cantina@example.com", formato="PALLET", colli_n=1, **kwargs):
        counter["n"] += 1
        return Shipment.objects.create(
            human_id      = kwargs.pop("human_id", f"SP-2025-05-20-{counter['n']:05d}"),
            email_cliente = email,
            formato_sped  = formato,
            colli_n       = colli_n,
            peso_reale_kg = Decimal("250.00") * colli_n,
            giorno_ritiro = kwargs.pop("giorno_ritiro", date(2025, 5, 30)),
            mittente      = {"rs": "Cantina Rossi", "citta": "Alba", "paese": "IT"},
            destinatario  = {"rs": "Wine Shop NY", "citta": "New York", "paese": "US"},
            **kwargs,
        )
    return _make


@pytest.fixture
def pallet_shipments(make_shipment):
    """Six single-pallet shipments: exactly the wave minimum."""
    return [make_shipment() for _ in range(6)]


@pytest.fixture
def make_wave(db, staff):
    from apps.pallets.models import PalletWave
    counter = {"n": 0}

    def _make(carrier, status="bozza", code=None):
        counter["n"] += 1
        return PalletWave.objects.create(
            code                = code or f"WV-20250601-{counter['n']:03d}",
            status              = status,
            planned_pickup_date = date(2025, 6, 1),
            carrier             = carrier,
            created_by          = staff,
        )
    return _make
