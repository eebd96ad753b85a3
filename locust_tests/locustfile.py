"""
SPST Load Test — Locust Script
==============================
Simulates wineries booking pallet shipments during the pre-harvest rush,
plus back-office operators planning waves.

Usage:
    locust -f locust_tests/locustfile.py --host=http://localhost:8000 \
           --users=300 --spawn-rate=30 --run-time=5m --headless

The operator account must exist (seed_initial_data + a StaffUser row).
"""

import random
import uuid
from locust import HttpUser, task, between, events
from locust.exception import StopUser

REGIONS = [("Alba", "12051"), ("Montalcino", "53024"), ("Valdobbiadene", "31049"), ("Manduria", "74024")]
BOTTLE_COUNTS = [6, 12, 18, 24, 36, 48, 60]

OPERATOR_EMAIL    = "operatore@spst.it"
OPERATOR_PASSWORD = "Test@1234"


def _party(name):
    citta, cap = random.choice(REGIONS)
    return {"rs": name, "paese": "IT", "citta": citta, "cap": cap, "indirizzo": "Via Roma 1"}


class WineryCustomer(HttpUser):
    """
    A winery account: books shipments, checks them, prices US duties.
    Tasks weighted to reflect real-world usage patterns.
    """
    wait_time = between(0.5, 2.0)
    token     = None
    email     = None

    def on_start(self):
        self.email = f"cantina-{uuid.uuid4().hex[:8]}@example.com"
        self.client.post(
            "/api/auth/register/",
            json={"email": self.email, "full_name": "Cantina di prova", "password": "Vendemmia@2025"},
            name="/api/auth/register/",
        )
        resp = self.client.post(
            "/api/auth/login/",
            json={"email": self.email, "password": "Vendemmia@2025"},
            name="/api/auth/login/",
        )
        if resp.status_code == 200:
            self.token = resp.json().get("access")
        else:
            raise StopUser()

    def _headers(self):
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    # ── Tasks (weighted) ──────────────────────────────────────────────────────

    @task(5)
    def book_pallet_shipment(self):
        """Most common action — a winery books one or two pallets."""
        colli = [
            {"contenuto": "Vino", "peso_reale_kg": random.randint(250, 700),
             "lato1_cm": 120, "lato2_cm": 80, "lato3_cm": random.randint(100, 180)}
            for _ in range(random.randint(1, 2))
        ]
        resp = self.client.post(
            "/api/spedizioni/",
            json={
                "tipo_spedizione": "B2B",
                "formato_sped":    "PALLET",
                "mittente":        _party("Cantina di prova"),
                "destinatario":    _party("Enoteca Centrale"),
                "colli":           colli,
            },
            headers=self._headers(),
            name="/api/spedizioni/ [POST]",
        )
        if resp.status_code == 201:
            self._shipment_id = resp.json().get("id")

    @task(3)
    def list_shipments(self):
        self.client.get("/api/spedizioni/", headers=self._headers(), name="/api/spedizioni/")

    @task(2)
    def shipment_detail(self):
        shipment_id = getattr(self, "_shipment_id", None)
        if shipment_id:
            self.client.get(f"/api/spedizioni/{shipment_id}/", headers=self._headers(),
                            name="/api/spedizioni/[id]/")

    @task(2)
    def duties_quote(self):
        """Public US duties calculator."""
        self.client.post(
            "/api/usa-shipping-pay/quote/",
            json={"bottle_count": random.choice(BOTTLE_COUNTS), "goods_value": str(random.randint(60, 2000))},
            name="/api/usa-shipping-pay/quote/",
        )

    @task(1)
    def health_check(self):
        self.client.get("/api/health/deep/", name="/api/health/deep/")


class BackOfficeOperator(HttpUser):
    """
    Back-office operators (fewer, but heavier queries).
    """
    wait_time = between(2, 5)
    token     = None
    weight    = 1

    def on_start(self):
        resp = self.client.post(
            "/api/auth/login/",
            json={"email": OPERATOR_EMAIL, "password": OPERATOR_PASSWORD},
        )
        if resp.status_code == 200:
            self.token = resp.json().get("access")
        else:
            raise StopUser()

    def _h(self):
        return {"Authorization": f"Bearer {self.token}"}

    @task(3)
    def dashboard(self):
        self.client.get("/api/admin/dashboard/summary/", headers=self._h(), name="/api/admin/dashboard/")

    @task(2)
    def pallet_pool(self):
        self.client.get("/api/pallets/pool/", headers=self._h(), name="/api/pallets/pool/")

    @task(2)
    def waves(self):
        self.client.get("/api/pallets/waves/", headers=self._h(), name="/api/pallets/waves/")

    @task(1)
    def quote_requests(self):
        self.client.get("/api/quote-requests/", headers=self._h(), name="/api/quote-requests/")


# ── Custom events for Locust reporting ────────────────────────────────────────
@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    print("\n=== SPST Load Test Complete ===")
    stats = environment.stats.total
    print(f"Total requests:      {stats.num_requests}")
    print(f"Failures:            {stats.num_failures}")
    print(f"Avg response time:   {stats.avg_response_time:.0f}ms")
    print(f"95th percentile:     {stats.get_response_time_percentile(0.95):.0f}ms")
    if stats.num_failures / max(stats.num_requests, 1) > 0.01:
        print("⚠ FAILURE RATE > 1%")
    else:
        print("✓ System stable under load")
