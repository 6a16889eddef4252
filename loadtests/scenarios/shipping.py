"""Shipping load test scenarios.

Three stateful SequentialTaskSet journeys: the delivery happy path, a
refused parcel that goes back to the sender, and bursts of carrier webhook
callbacks against one shipment.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import (
    delivery_data,
    return_data,
    shipment_data,
    tracking_event_data,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import ShipmentState


class _ShipmentJourney(SequentialTaskSet):
    """Shared steps: every journey starts with a created shipment."""

    def on_start(self):
        self.state = ShipmentState()

    def _create(self):
        payload = shipment_data()
        with self.client.post(
            "/shipments",
            json=payload,
            catch_response=True,
            name="POST /shipments",
        ) as resp:
            if resp.status_code == 201:
                self.state.shipment_id = resp.json()["shipment_id"]
                self.state.tracking_number = payload["tracking_number"]
                self.state.seller_id = payload["seller_id"]
            else:
                resp.failure(f"Create shipment failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    def _put(self, path: str, name: str, payload: dict, next_status: str | None = None):
        with self.client.put(
            f"/shipments/{self.state.shipment_id}{path}",
            json=payload,
            catch_response=True,
            name=name,
        ) as resp:
            if resp.status_code == 200:
                if next_status:
                    self.state.current_status = next_status
            else:
                resp.failure(f"{name} failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()


class ShipmentDeliveryJourney(_ShipmentJourney):
    """Create -> Label -> Shipped -> Tracking events -> Deliver -> Read back."""

    @task
    def create_shipment(self):
        self._create()

    @task
    def generate_label(self):
        self._put("/label", "PUT /shipments/{id}/label", {"label_format": random.choice(["PDF", "ZPL", "PNG"])})

    @task
    def mark_shipped(self):
        self._put(
            "/status",
            "PUT /shipments/{id}/status",
            {"status": "Shipped", "description": "Handed over to carrier"},
            next_status="Shipped",
        )

    @task
    def record_tracking(self):
        for status in ("in_transit", "out_for_delivery"):
            with self.client.post(
                f"/shipments/{self.state.shipment_id}/tracking-events",
                json=tracking_event_data(status),
                catch_response=True,
                name="POST /shipments/{id}/tracking-events",
            ) as resp:
                if resp.status_code == 201:
                    self.state.events_recorded += 1
                else:
                    resp.failure(f"Tracking event failed: {resp.status_code}: {extract_error_detail(resp)}")
                    self.interrupt()

    @task
    def deliver(self):
        self._put("/deliver", "PUT /shipments/{id}/deliver", delivery_data(), next_status="Delivered")

    @task
    def read_back(self):
        with self.client.get(
            f"/shipments/tracking/{self.state.tracking_number}",
            catch_response=True,
            name="GET /shipments/tracking/{tracking_number}",
        ) as resp:
            if resp.status_code != 200 or not resp.json()["is_delivered"]:
                resp.failure(f"Expected delivered shipment: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class ShipmentReturnJourney(_ShipmentJourney):
    """Create -> Shipped -> Delivery failed -> Return to sender."""

    @task
    def create_shipment(self):
        self._create()

    @task
    def mark_shipped(self):
        self._put("/status", "PUT /shipments/{id}/status", {"status": "Shipped"}, next_status="Shipped")

    @task
    def delivery_failed(self):
        self._put(
            "/status",
            "PUT /shipments/{id}/status",
            {"status": "Delivery Failed", "description": "Recipient absent"},
            next_status="Delivery Failed",
        )

    @task
    def process_return(self):
        self._put("/return", "PUT /shipments/{id}/return", return_data(), next_status="Returned")

    @task
    def done(self):
        self.interrupt()


class CarrierWebhookBurstJourney(_ShipmentJourney):
    """One shipment, many webhook callbacks addressed by tracking number."""

    @task
    def create_shipment(self):
        self._create()

    @task
    def webhook_burst(self):
        for _ in range(random.randint(3, 8)):
            payload = tracking_event_data()
            payload["tracking_number"] = self.state.tracking_number
            with self.client.post(
                "/shipments/tracking/webhook",
                json=payload,
                headers={"X-Carrier-Signature": "load-test"},
                catch_response=True,
                name="POST /shipments/tracking/webhook",
            ) as resp:
                if resp.status_code == 200:
                    self.state.events_recorded += 1
                else:
                    resp.failure(f"Webhook failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def sync_carrier(self):
        self._put("/sync", "PUT /shipments/{id}/sync", {})

    @task
    def done(self):
        self.interrupt()


class ShippingUser(HttpUser):
    """Locust user simulating shipment traffic.

    Weighted distribution:
    - 50% Delivery journey
    - 20% Return journey
    - 30% Webhook bursts
    """

    wait_time = between(0.5, 2.0)
    tasks = {
        ShipmentDeliveryJourney: 5,
        ShipmentReturnJourney: 2,
        CarrierWebhookBurstJourney: 3,
    }


class ShippingReportUser(HttpUser):
    """Read-heavy user polling the late-shipment and statistics reports."""

    wait_time = between(2.0, 5.0)

    @task(3)
    def stats(self):
        self.client.get(
            "/shipments/stats",
            params={"seller_id": f"seller-{random.randint(1, 20)}"},
            name="GET /shipments/stats",
        )

    @task(1)
    def late(self):
        self.client.get("/shipments/late", name="GET /shipments/late")
