"""Shipment delivery — commands and handler.

Records delivery confirmation and schedules the delivery estimate.
"""

import structlog
from protean import handle
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from shipping.domain import shipping
from shipping.shipment.shipment import Shipment

logger = structlog.get_logger(__name__)


@shipping.command(part_of="Shipment")
class MarkAsDelivered:
    """Confirm delivery to the recipient."""

    shipment_id = Identifier(required=True)
    received_by = String(max_length=200)
    delivery_location = String(max_length=200)
    signature = Text()
    photo = String(max_length=500)
    notes = String(max_length=500)


@shipping.command(part_of="Shipment")
class ScheduleDelivery:
    """Set the delivery time-frame and recompute the estimated date."""

    shipment_id = Identifier(required=True)
    min_days = Integer(min_value=0)
    max_days = Integer(min_value=0)


@shipping.command_handler(part_of=Shipment)
class DeliveryHandler:
    @handle(MarkAsDelivered)
    def mark_as_delivered(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        shipment.mark_as_delivered(
            received_by=command.received_by or "",
            delivery_location=command.delivery_location or "",
            signature=command.signature or "",
            photo=command.photo or "",
            notes=command.notes or "",
        )
        repo.add(shipment)
        logger.info(
            "Shipment delivered",
            shipment_id=str(shipment.id),
            order_id=str(shipment.order_id),
            delivery_days=shipment.actual_delivery_days,
        )
        return shipment

    @handle(ScheduleDelivery)
    def schedule_delivery(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        estimate = shipment.schedule_delivery(command.min_days, command.max_days)
        repo.add(shipment)
        if estimate is None:
            logger.info("Delivery time-frame set before shipping", shipment_id=str(shipment.id))
        return shipment
