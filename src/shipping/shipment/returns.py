"""Returning parcels to the seller."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from shipping.domain import shipping
from shipping.shipment.shipment import Shipment

logger = structlog.get_logger(__name__)


@shipping.command(part_of="Shipment")
class ProcessReturn:
    """Record that the parcel is going back to the seller."""

    shipment_id = Identifier(required=True)
    reason = String(required=True, max_length=50)
    return_tracking_number = String(max_length=255)


@shipping.command_handler(part_of=Shipment)
class ReturnHandler:
    @handle(ProcessReturn)
    def process_return(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        shipment.process_return(command.reason, command.return_tracking_number or "")
        repo.add(shipment)
        logger.info(
            "Shipment returned",
            shipment_id=str(shipment.id),
            reason=command.reason,
            return_tracking_number=command.return_tracking_number,
        )
        return shipment
