"""Shipment domain events — immutable facts about shipment state changes.

Events are past tense and versioned. Nested data (addresses, locations) is
carried as JSON text so downstream projectors stay schema-light.
"""

from protean.fields import DateTime, Identifier, Integer, String, Text

from shipping.domain import shipping


@shipping.event(part_of="Shipment")
class ShipmentCreated:
    """A shipment record was opened for an order."""

    __version__ = 1

    shipment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    carrier = String(required=True)
    tracking_number = String(required=True)
    shipping_method = String(required=True)
    created_at = DateTime(required=True)


@shipping.event(part_of="Shipment")
class ShippingStatusChanged:
    """The overall shipping status was set explicitly."""

    __version__ = 1

    shipment_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)


@shipping.event(part_of="Shipment")
class TrackingEventRecorded:
    """A tracking event was appended to the shipment history."""

    __version__ = 1

    shipment_id = Identifier(required=True)
    tracking_number = String(required=True)
    status = String(required=True)
    description = String(required=True)
    location = Text()  # JSON object
    source = String(required=True)
    shipping_status = String(required=True)
    occurred_at = DateTime(required=True)


@shipping.event(part_of="Shipment")
class ShipmentDelivered:
    """Delivery was confirmed and the confirmation record replaced."""

    __version__ = 1

    shipment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    received_by = String()
    delivered_at = DateTime(required=True)


@shipping.event(part_of="Shipment")
class ShipmentReturned:
    """The parcel was sent back to the seller."""

    __version__ = 1

    shipment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    reason = String(required=True)
    return_tracking_number = String()
    returned_at = DateTime(required=True)


@shipping.event(part_of="Shipment")
class DeliveryScheduled:
    """A delivery time-frame was set and the estimate recomputed."""

    __version__ = 1

    shipment_id = Identifier(required=True)
    max_days = Integer(required=True)
    estimated_delivery_date = DateTime()
    scheduled_at = DateTime(required=True)


@shipping.event(part_of="Shipment")
class ShippingLabelAttached:
    """A carrier label was generated for the shipment."""

    __version__ = 1

    shipment_id = Identifier(required=True)
    label_url = String(required=True)
    label_format = String(required=True)
    attached_at = DateTime(required=True)
