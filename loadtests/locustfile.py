"""Shipping Load Testing — Locust entry point.

Usage:
    # All scenarios (web UI):
    locust -f loadtests/locustfile.py

    # Shipment journeys only:
    locust -f loadtests/locustfile.py ShippingUser

    # Headless (CI mode):
    locust -f loadtests/locustfile.py ShippingUser --headless \
           -u 50 -r 5 -t 300s --csv=results/loadtest
"""

import logging
import time

import requests
from locust import events

from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.shipping import ShippingReportUser, ShippingUser  # noqa: F401

logger = logging.getLogger("loadtest")


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log the API error body for every failed request."""
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400:
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, extract_error_detail(response))


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}\n")


@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    """Print the service's aggregate shipping stats when the run ends."""
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}")
    if not environment.host:
        return
    try:
        resp = requests.get(f"{environment.host}/shipments/stats", timeout=5)
        resp.raise_for_status()
    except requests.RequestException as e:
        print(f"[LOADTEST] Could not fetch shipping stats: {e}\n")
        return
    stats = resp.json()
    print("[LOADTEST] Final shipping stats:")
    for key in ("total_shipments", "delivered_count", "in_transit_count", "failed_count", "average_delivery_days"):
        print(f"  {key}: {stats.get(key)}")
    print()
