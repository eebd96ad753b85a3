"""
Access, auth, notification and ops tests
========================================
Covers: actor resolution | carrier scoping | ownership | JWT login | customer search
        | email normalisation | health + metrics + dashboard | seed command
"""

import pytest
from io import StringIO
from django.core.management import call_command
from rest_framework import status


# ═══════════════════════════════════════════════════════════════════════════════
# UNIT TESTS — Actor resolution
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.mark.django_db
class TestResolveActor:

    def test_anonymous(self):
        from django.contrib.auth.models import AnonymousUser
        from apps.authentication.access import resolve_actor
        actor = resolve_actor(AnonymousUser())
        assert actor.ok is False
        assert actor.error == "UNAUTHENTICATED"
        assert actor.status == 401

    def test_break_glass_is_admin(self, break_glass):
        from apps.authentication.access import resolve_actor
        actor = resolve_actor(break_glass)
        assert actor.is_staff
        assert actor.role == "admin"

    def test_staff_row(self, staff):
        from apps.authentication.access import resolve_actor
        actor = resolve_actor(staff)
        assert actor.kind == "staff"
        assert actor.role == "operator"

    def test_disabled_staff_row_is_customer(self, staff):
        from apps.authentication.access import resolve_actor
        staff.staff_profile.enabled = False
        staff.staff_profile.save()
        assert resolve_actor(staff).kind == "customer"

    def test_staff_wins_over_carrier_link(self, staff, carrier_a):
        from apps.authentication.access import resolve_actor
        from apps.pallets.models import CarrierUser
        CarrierUser.objects.create(user=staff, carrier=carrier_a)
        assert resolve_actor(staff).kind == "staff"

    def test_carrier_user_with_several_carriers(self, carrier_user_a, carrier_b):
        from apps.authentication.access import resolve_actor
        from apps.pallets.models import CarrierUser
        CarrierUser.objects.create(user=carrier_user_a, carrier=carrier_b)
        actor = resolve_actor(carrier_user_a)
        assert actor.kind == "carrier"
        assert len(actor.carrier_ids) == 2

    def test_plain_user_is_customer(self, customer):
        from apps.authentication.access import resolve_actor
        actor = resolve_actor(customer)
        assert actor.ok and actor.kind == "customer"
        assert not actor.is_staff


@pytest.mark.django_db
class TestCapabilityChecks:

    def test_require_staff_rejects_customer(self, customer):
        from apps.authentication.access import require_staff
        actor = require_staff(customer)
        assert actor.ok is False
        assert actor.error == "FORBIDDEN"
        assert actor.as_response().status_code == 403

    def test_require_carrier_scoped_to_carrier(self, carrier_user_a, carrier_a, carrier_b):
        from apps.authentication.access import require_carrier
        assert require_carrier(carrier_user_a, carrier_a.id).ok is True
        assert require_carrier(carrier_user_a, carrier_b.id).error == "FORBIDDEN"

    def test_require_carrier_rejects_staff(self, staff, carrier_a):
        from apps.authentication.access import require_carrier
        assert require_carrier(staff, carrier_a.id).ok is False

    def test_ownership(self, customer, staff):
        from apps.authentication.access import resolve_actor, can_access_owned
        assert can_access_owned(resolve_actor(customer), " Cantina@Example.COM ")
        assert not can_access_owned(resolve_actor(customer), "altro@example.com")
        assert not can_access_owned(resolve_actor(customer), "")
        assert can_access_owned(resolve_actor(staff), "altro@example.com")


# ═══════════════════════════════════════════════════════════════════════════════
# INTEGRATION TESTS — Auth endpoints
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.mark.django_db
class TestAuthEndpoints:

    def test_register_then_login(self, api_client):
        resp = api_client.post("/api/auth/register/", {
            "email": " Nuovo@Example.com", "full_name": "Nuovo Cliente", "password": "Secret@123",
        }, format="json")
        assert resp.status_code == status.HTTP_201_CREATED

        resp = api_client.post("/api/auth/login/", {"email": "nuovo@example.com", "password": "Secret@123"},
                               format="json")
        assert resp.status_code == status.HTTP_200_OK
        assert "access" in resp.data

    def test_duplicate_email(self, api_client, customer):
        resp = api_client.post("/api/auth/register/", {
            "email": "cantina@example.com", "password": "Secret@123",
        }, format="json")
        assert resp.status_code == status.HTTP_400_BAD_REQUEST
        assert resp.data["error"] == "INVALID_PAYLOAD"

    def test_me_reports_actor(self, client_for, carrier_user_a, carrier_a):
        resp = client_for(carrier_user_a).get("/api/auth/me/")
        assert resp.data["actor"]["kind"] == "carrier"
        assert resp.data["actor"]["carrier_ids"] == [str(carrier_a.id)]

    def test_me_requires_login(self, api_client):
        resp = api_client.get("/api/auth/me/")
        assert resp.status_code == status.HTTP_401_UNAUTHORIZED
        assert resp.data == {"ok": False, "error": "UNAUTHENTICATED"}


# ═══════════════════════════════════════════════════════════════════════════════
# INTEGRATION TESTS — Customer search
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.mark.django_db
class TestCustomerSearch:

    def emails(self, resp):
        return [row["email"] for row in resp.data["customers"]]

    def test_matches_email_and_name(self, client_for, staff, customer, other_customer):
        api = client_for(staff)
        assert self.emails(api.get("/api/customers/search/?q=CANTINA")) == ["cantina@example.com"]
        assert self.emails(api.get("/api/customers/search/", {"q": "altro cliente"})) == ["altro@example.com"]

    def test_matches_saved_company_name(self, client_for, staff, customer, other_customer):
        from apps.shipments.models import ShipperDefaults
        ShipperDefaults.objects.create(email_norm="altro@example.com", mittente={"rs": "Tenuta Langhe"})

        resp = client_for(staff).get("/api/customers/search/?q=langhe")

        assert self.emails(resp) == ["altro@example.com"]
        assert resp.data["customers"][0]["company_name"] == "Tenuta Langhe"

    def test_empty_query_lists_newest_customers_only(self, client_for, staff, break_glass, customer,
                                                     other_customer, carrier_user_a):
        resp = client_for(staff).get("/api/customers/search/")
        assert resp.data["ok"] is True
        assert self.emails(resp) == ["altro@example.com", "cantina@example.com"]

    @pytest.mark.parametrize("limit,expected", [("1", 1), ("0", 1), ("abc", 2), ("500", 2)])
    def test_limit_is_clamped(self, client_for, staff, customer, other_customer, limit, expected):
        resp = client_for(staff).get(f"/api/customers/search/?limit={limit}")
        assert len(resp.data["customers"]) == expected

    def test_no_match(self, client_for, staff, customer):
        resp = client_for(staff).get("/api/customers/search/?q=nessuno")
        assert resp.data == {"ok": True, "customers": []}

    def test_customer_forbidden(self, client_for, customer):
        resp = client_for(customer).get("/api/customers/search/?q=a")
        assert resp.status_code == status.HTTP_403_FORBIDDEN
        assert resp.data["error"] == "FORBIDDEN"


# ═══════════════════════════════════════════════════════════════════════════════
# UNIT TESTS — Notifications
# ═══════════════════════════════════════════════════════════════════════════════

class TestNotificationService:

    def test_recipients_normalised(self):
        from apps.notifications.service import normalize_recipients
        assert normalize_recipients([" A@X.com", "a@x.com", "", "no-at", "b@y.com"]) == ["a@x.com", "b@y.com"]
        assert normalize_recipients("C@Z.it") == ["c@z.it"]

    def test_no_recipients_skips(self, no_real_email):
        from apps.notifications.service import NotificationService
        assert NotificationService().send_email([], "Oggetto", "<p>x</p>") is False
        no_real_email.assert_not_called()

    def test_missing_key_skips(self, no_real_email):
        from apps.notifications.service import NotificationService
        assert NotificationService(api_key="").send_email("a@x.com", "Oggetto", "<p>x</p>") is False
        no_real_email.assert_not_called()

    def test_provider_error_is_swallowed(self, no_real_email):
        from apps.notifications.service import NotificationService
        no_real_email.side_effect = RuntimeError("503 from provider")
        assert NotificationService().send_email("a@x.com", "Oggetto", "<p>x</p>") is False

    def test_params_sent(self, no_real_email):
        from apps.notifications.service import NotificationService
        sent = NotificationService(sender="SPST <x@spst.test>").send_email(
            "a@x.com", "Oggetto", "<p>x</p>", reply_to="info@spst.it",
        )
        assert sent is True
        params = no_real_email.call_args[0][0]
        assert params == {
            "from": "SPST <x@spst.test>", "to": ["a@x.com"], "subject": "Oggetto",
            "html": "<p>x</p>", "reply_to": "info@spst.it",
        }


# ═══════════════════════════════════════════════════════════════════════════════
# INTEGRATION TESTS — Ops
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.mark.django_db
class TestOps:

    def test_deep_health(self, api_client):
        resp = api_client.get("/api/health/deep/")
        assert resp.status_code == status.HTTP_200_OK
        assert resp.data["status"] == "ok"
        assert resp.data["checks"]["config"]["stripe_webhook_secret"] is True

    def test_metrics_counts(self, client_for, staff, make_shipment, make_wave, carrier_a):
        make_shipment()
        make_shipment(status="CONSEGNATA")
        make_wave(carrier_a)
        resp = client_for(staff).get("/api/ops/metrics/")
        body = resp.content.decode()
        assert 'spst_shipments_total{status="CREATA"} 1' in body
        assert 'spst_shipments_total{status="CONSEGNATA"} 1' in body
        assert 'spst_waves_total{status="bozza"} 1' in body

    def test_metrics_staff_only(self, client_for, customer):
        assert client_for(customer).get("/api/ops/metrics/").status_code == status.HTTP_403_FORBIDDEN

    def test_dashboard_summary(self, client_for, break_glass, make_shipment):
        make_shipment()
        resp = client_for(break_glass).get("/api/admin/dashboard/summary/")
        assert resp.data["ok"] is True
        assert resp.data["shipments_by_status"] == {"CREATA": 1}
        assert resp.data["open_quotes"] == 0


@pytest.mark.django_db
class TestBackofficeLinks:

    def add(self, api, **extra):
        payload = {"category": "Corrieri", "label": "BRT", "url": "https://vas.brt.it", **extra}
        return api.post("/api/admin/links/", payload, format="json")

    def test_create_and_list_in_order(self, client_for, staff):
        api = client_for(staff)
        self.add(api, label="GLS", url="https://gls-italy.com", sort_order=20)
        self.add(api, label="BRT", sort_order=10)
        self.add(api, category="Dogana", label="AIDA", url="https://aida.adm.gov.it")

        resp = api.get("/api/admin/links/")

        assert resp.data["ok"] is True
        assert [r["label"] for r in resp.data["rows"]] == ["BRT", "GLS", "AIDA"]
        assert resp.data["rows"][2]["sort_order"] == 100

    @pytest.mark.parametrize("missing", ["category", "label", "url"])
    def test_missing_fields(self, client_for, staff, missing):
        payload = {"category": "Corrieri", "label": "BRT", "url": "https://vas.brt.it"}
        payload[missing] = ""
        resp = client_for(staff).post("/api/admin/links/", payload, format="json")
        assert resp.status_code == status.HTTP_400_BAD_REQUEST
        assert resp.data["error"] == "MISSING_FIELDS"

    def test_patch(self, client_for, staff):
        api = client_for(staff)
        link_id = self.add(api).data["row"]["id"]
        resp = api.patch(f"/api/admin/links/{link_id}/", {"label": "BRT VAS", "sort_order": 5}, format="json")
        assert resp.data["row"]["label"] == "BRT VAS"
        assert resp.data["row"]["url"] == "https://vas.brt.it"

    def test_delete_retires_link(self, client_for, staff):
        from apps.ops.models import BackofficeLink
        api = client_for(staff)
        link_id = self.add(api).data["row"]["id"]

        resp = api.delete(f"/api/admin/links/{link_id}/")

        assert resp.data["row"]["is_active"] is False
        assert BackofficeLink.objects.filter(pk=link_id).exists()
        assert api.get("/api/admin/links/").data["rows"] == []

    def test_unknown_link(self, client_for, staff):
        resp = client_for(staff).delete("/api/admin/links/00000000-0000-0000-0000-000000000000/")
        assert resp.status_code == status.HTTP_404_NOT_FOUND
        assert resp.data["error"] == "LINK_NOT_FOUND"

    def test_staff_only(self, client_for, customer):
        resp = client_for(customer).get("/api/admin/links/")
        assert resp.status_code == status.HTTP_403_FORBIDDEN


# ═══════════════════════════════════════════════════════════════════════════════
# INTEGRATION TESTS — Seed command
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.mark.django_db
class TestSeedCommand:

    def test_seed_is_idempotent(self):
        from apps.authentication.models import StaffUser
        from apps.pallets.models import Carrier

        out = StringIO()
        call_command("seed_initial_data", stdout=out)
        call_command("seed_initial_data", stdout=StringIO())

        assert "Seeded 6 carriers and 1 staff users." in out.getvalue()
        assert Carrier.objects.count() == 6
        staff = StaffUser.objects.get(user__email="info@spst.it")
        assert staff.role == "admin"
