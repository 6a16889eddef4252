"""Fake carrier adapter — deterministic carrier for tests and development.

Tracking feeds are remembered per tracking number so repeated syncs see the
same events; tests can script feeds with push_event().
"""

from datetime import UTC, datetime, timedelta

from shipping.carrier.port import CarrierPort


class FakeCarrier(CarrierPort):
    def __init__(self):
        self.should_succeed = True
        self.failure_reason = "Carrier unavailable"
        self._feeds: dict[str, list[dict]] = {}

    def configure(self, should_succeed: bool = True, failure_reason: str = "Carrier unavailable"):
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def push_event(
        self,
        tracking_number: str,
        status: str,
        description: str = "",
        location: str | None = None,
        occurred_at: datetime | None = None,
    ) -> None:
        self._feeds.setdefault(tracking_number, []).append(
            {
                "status": status,
                "description": description or status,
                "location": location,
                "occurred_at": (occurred_at or datetime.now(UTC)).isoformat(),
            }
        )

    def create_label(self, tracking_number: str, carrier: str, label_format: str = "PDF") -> dict:
        if not self.should_succeed:
            return {"label_url": None, "error": self.failure_reason}
        slug = carrier.lower().replace(" ", "-")
        return {"label_url": f"https://labels.fake-carrier.example.com/{slug}/{tracking_number}.{label_format.lower()}"}

    def get_tracking(self, tracking_number: str) -> dict:
        if not self.should_succeed:
            return {"status": "unknown", "events": [], "error": self.failure_reason}

        if tracking_number not in self._feeds:
            picked_up_at = datetime.now(UTC).replace(microsecond=0)
            self.push_event(tracking_number, "picked_up", "Package picked up by carrier", "Depot Lyon", picked_up_at)
            self.push_event(
                tracking_number,
                "in_transit",
                "Package in transit",
                "Hub Paris Nord",
                picked_up_at + timedelta(hours=6),
            )

        events = self._feeds[tracking_number]
        return {"status": events[-1]["status"] if events else "unknown", "events": list(events)}

    def verify_webhook_signature(self, _payload: str, signature: str) -> bool:
        # Anything except an explicit "invalid" marker passes
        return signature != "invalid"
