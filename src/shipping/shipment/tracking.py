"""Shipment tracking — commands and handler.

RecordTrackingEvent persists one event reported by an operator, the API or
a carrier webhook. SyncCarrierTracking pulls the carrier's event feed for
shipments with auto-tracking enabled and appends the events not seen yet.
"""

import json
from datetime import datetime

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from shipping.carrier import get_carrier
from shipping.domain import shipping
from shipping.shipment.shipment import EventSource, Shipment, TrackingEventStatus, as_utc

logger = structlog.get_logger(__name__)

_EVENT_STATUSES = {s.value for s in TrackingEventStatus}


@shipping.command(part_of="Shipment")
class RecordTrackingEvent:
    """Append a tracking event, addressed by shipment id or tracking number."""

    shipment_id = Identifier()
    tracking_number = String(max_length=255)
    status = String(required=True, max_length=50)
    description = String(required=True, max_length=500)
    location = Text()  # JSON object: city, region, country, facility
    timestamp = DateTime()
    source = String(max_length=20, default=EventSource.MANUAL.value)


@shipping.command(part_of="Shipment")
class SyncCarrierTracking:
    """Pull the carrier's tracking feed into the shipment history."""

    shipment_id = Identifier(required=True)


@shipping.command_handler(part_of=Shipment)
class TrackingHandler:
    @handle(RecordTrackingEvent)
    def record_tracking_event(self, command):
        repo = current_domain.repository_for(Shipment)
        if command.shipment_id:
            shipment = repo.get(command.shipment_id)
        else:
            shipment = repo.find_by_tracking_number(command.tracking_number or "")
            if shipment is None:
                raise ObjectNotFoundError(f"Shipment with tracking number `{command.tracking_number}` does not exist.")

        shipment.add_tracking_event(
            command.status,
            command.description,
            location=json.loads(command.location) if command.location else None,
            timestamp=command.timestamp,
            source=command.source,
        )
        repo.add(shipment)
        logger.info(
            "Tracking event recorded",
            shipment_id=str(shipment.id),
            event_status=command.status,
            source=command.source,
            shipping_status=shipment.shipping_status,
        )
        return shipment

    @handle(SyncCarrierTracking)
    def sync_carrier_tracking(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        if not shipment.auto_tracking:
            logger.info("Auto-tracking disabled, skipping carrier sync", shipment_id=str(shipment.id))
            return 0

        feed = get_carrier().get_tracking(shipment.tracking_number)
        if feed.get("error"):
            logger.warning(
                "Carrier tracking unavailable",
                shipment_id=str(shipment.id),
                tracking_number=shipment.tracking_number,
                error=feed["error"],
            )
            return 0

        seen = {(e.status, as_utc(e.timestamp)) for e in shipment.tracking_events or []}
        added = 0
        for entry in feed.get("events", []):
            occurred_at = datetime.fromisoformat(entry["occurred_at"])
            if entry["status"] not in _EVENT_STATUSES:
                logger.warning("Ignoring unknown carrier event status", event_status=entry["status"])
                continue
            if (entry["status"], as_utc(occurred_at)) in seen:
                continue
            shipment.add_tracking_event(
                entry["status"],
                entry.get("description") or entry["status"],
                location={"facility": entry["location"]} if entry.get("location") else None,
                timestamp=occurred_at,
                source=EventSource.CARRIER.value,
            )
            seen.add((entry["status"], as_utc(occurred_at)))
            added += 1

        if added:
            repo.add(shipment)
        logger.info("Carrier tracking synced", shipment_id=str(shipment.id), events_added=added)
        return added
