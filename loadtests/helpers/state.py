"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance keeps its own state; nothing is shared across
users. State holds the ids returned by creation endpoints so follow-up
requests can reference them.
"""

from dataclasses import dataclass


@dataclass
class ShipmentState:
    """Tracks state for a single simulated shipment lifecycle."""

    shipment_id: str | None = None
    tracking_number: str | None = None
    seller_id: str | None = None
    current_status: str = "Pending"
    events_recorded: int = 0
