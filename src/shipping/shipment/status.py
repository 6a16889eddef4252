"""Explicit shipping status updates.

The persisting counterpart of Shipment.update_status(): loads the shipment,
applies the status and its manual tracking event, saves, and returns the
saved aggregate.
"""

import json

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from shipping.domain import shipping
from shipping.shipment.shipment import Shipment

logger = structlog.get_logger(__name__)


@shipping.command(part_of="Shipment")
class UpdateShippingStatus:
    """Set the overall shipping status of a shipment."""

    shipment_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    description = String(max_length=500)
    location = Text()  # JSON object: city, region, country, facility


@shipping.command_handler(part_of=Shipment)
class ShippingStatusHandler:
    @handle(UpdateShippingStatus)
    def update_status(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        previous = shipment.shipping_status
        shipment.update_status(
            command.status,
            description=command.description or "",
            location=json.loads(command.location) if command.location else None,
        )
        repo.add(shipment)
        logger.info(
            "Shipping status updated",
            shipment_id=str(shipment.id),
            previous_status=previous,
            new_status=shipment.shipping_status,
        )
        return shipment
