"""Shipment tracking — customer-facing tracking page view."""

import json

from protean.core.projector import on
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from shipping.domain import shipping
from shipping.shipment.events import (
    ShipmentCreated,
    ShipmentDelivered,
    ShipmentReturned,
    ShippingStatusChanged,
    TrackingEventRecorded,
)
from shipping.shipment.shipment import Shipment


@shipping.projection
class ShipmentTrackingView:
    shipment_id = Identifier(identifier=True, required=True)
    order_id = Identifier(required=True)
    carrier = String()
    tracking_number = String()
    current_status = String(required=True)
    current_location = Text()  # JSON object
    events_json = Text()  # JSON list of tracking events
    delivered_at = DateTime()
    returned_at = DateTime()
    updated_at = DateTime()


@shipping.projector(projector_for=ShipmentTrackingView, aggregates=[Shipment])
class ShipmentTrackingProjector:
    @on(ShipmentCreated)
    def on_shipment_created(self, event):
        current_domain.repository_for(ShipmentTrackingView).add(
            ShipmentTrackingView(
                shipment_id=event.shipment_id,
                order_id=event.order_id,
                carrier=event.carrier,
                tracking_number=event.tracking_number,
                current_status="Pending",
                events_json=json.dumps([]),
                updated_at=event.created_at,
            )
        )

    @on(ShippingStatusChanged)
    def on_shipping_status_changed(self, event):
        repo = current_domain.repository_for(ShipmentTrackingView)
        view = repo.get(event.shipment_id)
        view.current_status = event.new_status
        view.updated_at = event.changed_at
        repo.add(view)

    @on(TrackingEventRecorded)
    def on_tracking_event_recorded(self, event):
        repo = current_domain.repository_for(ShipmentTrackingView)
        view = repo.get(event.shipment_id)
        view.current_status = event.shipping_status
        if event.location:
            view.current_location = event.location

        history = json.loads(view.events_json) if view.events_json else []
        history.append(
            {
                "status": event.status,
                "description": event.description,
                "location": json.loads(event.location) if event.location else None,
                "source": event.source,
                "occurred_at": event.occurred_at.isoformat() if event.occurred_at else None,
            }
        )
        view.events_json = json.dumps(history)
        view.updated_at = event.occurred_at
        repo.add(view)

    @on(ShipmentDelivered)
    def on_shipment_delivered(self, event):
        repo = current_domain.repository_for(ShipmentTrackingView)
        view = repo.get(event.shipment_id)
        view.current_status = "Delivered"
        view.delivered_at = event.delivered_at
        repo.add(view)

    @on(ShipmentReturned)
    def on_shipment_returned(self, event):
        repo = current_domain.repository_for(ShipmentTrackingView)
        view = repo.get(event.shipment_id)
        view.current_status = "Returned"
        view.returned_at = event.returned_at
        repo.add(view)
