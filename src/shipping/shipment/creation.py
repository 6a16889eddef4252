"""Shipment creation — command and handler.

Order reference and tracking number are unique across shipments; a clash
raises DuplicateShipmentError naming the offending field.
"""

import json

import structlog
from protean import handle
from protean.fields import Boolean, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from shipping.domain import shipping
from shipping.shipment.errors import DuplicateShipmentError
from shipping.shipment.shipment import (
    DeliveryAddress,
    DeliveryTimeframe,
    Insurance,
    PackageDetails,
    PackageDimensions,
    Shipment,
)

logger = structlog.get_logger(__name__)


@shipping.command(part_of="Shipment")
class CreateShipment:
    """Open a shipment record for an order marked for fulfillment."""

    order_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    tracking_number = String(required=True, max_length=255)
    carrier = String(max_length=20)
    carrier_service = String(max_length=100)
    shipping_method = String(max_length=20)
    tracking_url = String(max_length=500)
    shipping_address = Text(required=True)  # JSON object
    return_address = Text(required=True)  # JSON object
    package = Text(required=True)  # JSON object
    shipping_cost = Float(required=True, min_value=0.0)
    insurance = Text()  # JSON object
    delivery_timeframe = Text()  # JSON object with min_days/max_days
    signature_required = Boolean(default=False)
    saturday_delivery = Boolean(default=False)
    carrier_metadata = Text()  # JSON object
    internal_notes = String(max_length=1000)
    auto_tracking = Boolean(default=True)


def _loads(value):
    return json.loads(value) if isinstance(value, str) else value


def _address(data: dict) -> DeliveryAddress:
    fields = {k: v.strip() if isinstance(v, str) else v for k, v in data.items()}
    if fields.get("email"):
        fields["email"] = fields["email"].lower()
    return DeliveryAddress(**fields)


def _package(data: dict) -> PackageDetails:
    fields = dict(data)
    dimensions = fields.pop("dimensions", None)
    return PackageDetails(
        dimensions=PackageDimensions(**dimensions) if dimensions else None,
        **fields,
    )


@shipping.command_handler(part_of=Shipment)
class CreateShipmentHandler:
    @handle(CreateShipment)
    def create_shipment(self, command):
        repo = current_domain.repository_for(Shipment)
        order_id = str(command.order_id)
        tracking_number = command.tracking_number.strip()

        if repo.find_by_order(order_id) is not None:
            raise DuplicateShipmentError("order_id", order_id)
        if repo.find_by_tracking_number(tracking_number) is not None:
            raise DuplicateShipmentError("tracking_number", tracking_number)

        details = {
            "carrier": command.carrier,
            "carrier_service": command.carrier_service,
            "shipping_method": command.shipping_method,
            "tracking_url": command.tracking_url,
            "signature_required": command.signature_required,
            "saturday_delivery": command.saturday_delivery,
            "internal_notes": command.internal_notes,
            "auto_tracking": command.auto_tracking,
        }
        if command.insurance:
            details["insurance"] = Insurance(**_loads(command.insurance))
        if command.delivery_timeframe:
            details["delivery_timeframe"] = DeliveryTimeframe(**_loads(command.delivery_timeframe))
        if command.carrier_metadata:
            details["carrier_metadata"] = _loads(command.carrier_metadata)

        shipment = Shipment.create(
            order_id=order_id,
            seller_id=str(command.seller_id),
            tracking_number=tracking_number,
            shipping_address=_address(_loads(command.shipping_address)),
            return_address=_address(_loads(command.return_address)),
            package=_package(_loads(command.package)),
            shipping_cost=command.shipping_cost,
            **{k: v for k, v in details.items() if v is not None},
        )
        if not shipment.tracking_url:
            shipment.generate_tracking_url()

        repo.add(shipment)
        logger.info(
            "Shipment created",
            shipment_id=str(shipment.id),
            order_id=order_id,
            carrier=shipment.carrier,
            tracking_number=tracking_number,
        )
        return str(shipment.id)
