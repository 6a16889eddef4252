"""Carrier label generation.

Asks the configured carrier adapter for a label and records it on the
shipment.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from shipping.carrier import get_carrier
from shipping.domain import shipping
from shipping.shipment.shipment import LabelFormat, Shipment

logger = structlog.get_logger(__name__)


@shipping.command(part_of="Shipment")
class GenerateShippingLabel:
    shipment_id = Identifier(required=True)
    label_format = String(max_length=3, default=LabelFormat.PDF.value)


@shipping.command_handler(part_of=Shipment)
class LabelHandler:
    @handle(GenerateShippingLabel)
    def generate_label(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)

        result = get_carrier().create_label(
            tracking_number=shipment.tracking_number,
            carrier=shipment.carrier,
            label_format=command.label_format,
        )
        if result.get("error"):
            logger.warning("Label generation failed", shipment_id=str(shipment.id), error=result["error"])
            raise ValidationError({"shipping_label": [result["error"]]})

        shipment.attach_label(result["label_url"], command.label_format)
        repo.add(shipment)
        return result["label_url"]
