"""Shipment aggregate (CQRS) — the core of the shipping domain.

A Shipment tracks one order's physical delivery: the carrier and parcel
details, the overall shipping status, an append-only history of tracking
events, and the delivery or return outcome.

Two paths move the overall status:
    update_status()       explicit operator update, persisted by the
                          UpdateShippingStatus handler
    add_tracking_event()  in-memory append; event statuses found in
                          EVENT_STATUS_MAPPING overwrite the overall status,
                          callers persist

Terminal statuses (Delivered, Returned, Lost, Damaged, Cancelled) accept
further updates unless SHIPPING_ENFORCE_TERMINAL_STATES is enabled.
"""

import json
import math
import os
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Dict,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from shipping.domain import shipping
from shipping.shipment.events import (
    DeliveryScheduled,
    ShipmentCreated,
    ShipmentDelivered,
    ShipmentReturned,
    ShippingLabelAttached,
    ShippingStatusChanged,
    TrackingEventRecorded,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ShippingStatus(Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    READY_TO_SHIP = "Ready to Ship"
    SHIPPED = "Shipped"
    IN_TRANSIT = "In Transit"
    OUT_FOR_DELIVERY = "Out for Delivery"
    DELIVERED = "Delivered"
    DELIVERY_FAILED = "Delivery Failed"
    RETURNED = "Returned"
    LOST = "Lost"
    DAMAGED = "Damaged"
    CANCELLED = "Cancelled"


class TrackingEventStatus(Enum):
    LABEL_CREATED = "label_created"
    PICKED_UP = "picked_up"
    IN_TRANSIT = "in_transit"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    DELIVERY_ATTEMPTED = "delivery_attempted"
    EXCEPTION = "exception"
    RETURNED = "returned"
    LOST = "lost"
    DAMAGED = "damaged"


class EventSource(Enum):
    CARRIER = "carrier"
    API = "api"
    MANUAL = "manual"
    WEBHOOK = "webhook"


class Carrier(Enum):
    LA_POSTE = "La Poste"
    CHRONOPOST = "Chronopost"
    DHL = "DHL"
    UPS = "UPS"
    FEDEX = "FedEx"
    TNT = "TNT"
    MONDIAL_RELAY = "Mondial Relay"
    OTHER = "Autre"


class ShippingMethod(Enum):
    STANDARD = "Standard"
    EXPRESS = "Express"
    PREMIUM = "Premium"
    SAME_DAY = "Same Day"
    INTERNATIONAL = "International"


class ReturnReason(Enum):
    DELIVERY_FAILED = "delivery_failed"
    REFUSED_BY_RECIPIENT = "refused_by_recipient"
    INCORRECT_ADDRESS = "incorrect_address"
    DAMAGED_PACKAGE = "damaged_package"
    CUSTOMER_REQUEST = "customer_request"
    OTHER = "other"


class WeightUnit(Enum):
    GRAM = "g"
    KILOGRAM = "kg"
    POUND = "lb"
    OUNCE = "oz"


class DimensionUnit(Enum):
    CENTIMETER = "cm"
    INCH = "in"


class LabelFormat(Enum):
    PDF = "PDF"
    PNG = "PNG"
    ZPL = "ZPL"


IN_TRANSIT_STATUSES = (
    ShippingStatus.SHIPPED.value,
    ShippingStatus.IN_TRANSIT.value,
    ShippingStatus.OUT_FOR_DELIVERY.value,
)

TERMINAL_STATUSES = (
    ShippingStatus.DELIVERED.value,
    ShippingStatus.RETURNED.value,
    ShippingStatus.LOST.value,
    ShippingStatus.DAMAGED.value,
    ShippingStatus.CANCELLED.value,
)

# Tracking event statuses that drive the overall shipping status.
EVENT_STATUS_MAPPING = {
    TrackingEventStatus.DELIVERED.value: ShippingStatus.DELIVERED.value,
    TrackingEventStatus.OUT_FOR_DELIVERY.value: ShippingStatus.OUT_FOR_DELIVERY.value,
    TrackingEventStatus.IN_TRANSIT.value: ShippingStatus.IN_TRANSIT.value,
    TrackingEventStatus.PICKED_UP.value: ShippingStatus.SHIPPED.value,
    TrackingEventStatus.EXCEPTION.value: ShippingStatus.DELIVERY_FAILED.value,
    TrackingEventStatus.RETURNED.value: ShippingStatus.RETURNED.value,
    TrackingEventStatus.LOST.value: ShippingStatus.LOST.value,
    TrackingEventStatus.DAMAGED.value: ShippingStatus.DAMAGED.value,
}

# Statuses whose lower-cased name is not an event status.
_STATUS_EVENT_FALLBACK = {
    ShippingStatus.READY_TO_SHIP.value: TrackingEventStatus.LABEL_CREATED.value,
    ShippingStatus.SHIPPED.value: TrackingEventStatus.PICKED_UP.value,
    ShippingStatus.DELIVERY_FAILED.value: TrackingEventStatus.EXCEPTION.value,
}

TRACKING_URL_TEMPLATES = {
    Carrier.LA_POSTE.value: "https://www.laposte.fr/outils/suivre-vos-envois?code={tracking_number}",
    Carrier.CHRONOPOST.value: "https://www.chronopost.fr/tracking-colis?listeNumerosLT={tracking_number}",
    Carrier.DHL.value: (
        "https://www.dhl.com/fr-fr/home/tracking/tracking-express.html?submit=1&tracking-id={tracking_number}"
    ),
    Carrier.UPS.value: "https://www.ups.com/track?loc=fr_FR&tracknum={tracking_number}",
    Carrier.FEDEX.value: "https://www.fedex.com/apps/fedextrack/?tracknumbers={tracking_number}",
    Carrier.TNT.value: (
        "https://www.tnt.com/express/fr_fr/site/shipping-tools/tracking.html?searchType=con&cons={tracking_number}"
    ),
}

DEFAULT_DELIVERY_DAYS = 7

_SHIPPING_STATUSES = {s.value for s in ShippingStatus}
_EVENT_STATUSES = {s.value for s in TrackingEventStatus}
_RETURN_REASONS = {r.value for r in ReturnReason}


def terminal_states_enforced() -> bool:
    """Whether terminal statuses reject further updates."""
    flag = os.environ.get("SHIPPING_ENFORCE_TERMINAL_STATES", "false")
    return flag.lower() in ("1", "true", "yes")


def event_status_for(shipping_status: str) -> str | None:
    """Map an overall status to the tracking event recorded for it.

    Returns None for statuses with no tracking counterpart (Pending,
    Processing, Cancelled).
    """
    token = "_".join(shipping_status.lower().split())
    if token in _EVENT_STATUSES:
        return token
    return _STATUS_EVENT_FALLBACK.get(shipping_status)


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _is_metadata_value(value) -> bool:
    if isinstance(value, dict):
        return all(isinstance(k, str) and _is_metadata_value(v) for k, v in value.items())
    return isinstance(value, (str, int, float, bool))


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@shipping.value_object(part_of="Shipment")
class DeliveryAddress:
    """A postal address; replaced wholesale, never edited in place."""

    first_name = String(required=True, max_length=100)
    last_name = String(required=True, max_length=100)
    company = String(max_length=200)
    street = String(required=True, max_length=255)
    street2 = String(max_length=255)
    city = String(required=True, max_length=100)
    region = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100, default="France")
    phone = String(max_length=30)
    email = String(max_length=254)
    instructions = String(max_length=500)


@shipping.value_object(part_of="Shipment")
class EventLocation:
    """Where a tracking event happened."""

    city = String(max_length=100)
    region = String(max_length=100)
    country = String(max_length=100)
    facility = String(max_length=200)


@shipping.value_object(part_of="Shipment")
class PackageDimensions:
    length = Float(min_value=0.0)
    width = Float(min_value=0.0)
    height = Float(min_value=0.0)
    unit = String(max_length=2, choices=DimensionUnit, default=DimensionUnit.CENTIMETER.value)


@shipping.value_object(part_of="Shipment")
class PackageDetails:
    """Physical parcel description and declared value."""

    weight = Float(required=True, min_value=0.0)
    weight_unit = String(max_length=2, choices=WeightUnit, default=WeightUnit.GRAM.value)
    dimensions = ValueObject(PackageDimensions)
    declared_value = Float(required=True, min_value=0.0)
    currency = String(max_length=3, default="EUR")
    description = String(required=True, max_length=500)


@shipping.value_object(part_of="Shipment")
class Insurance:
    is_insured = Boolean(default=False)
    insured_value = Float(min_value=0.0)
    cost = Float(min_value=0.0)


@shipping.value_object(part_of="Shipment")
class DeliveryTimeframe:
    """Business-day bounds used to estimate the delivery date."""

    min_days = Integer(min_value=0)
    max_days = Integer(min_value=0)

    @invariant.post
    def min_days_cannot_exceed_max_days(self):
        if self.min_days is not None and self.max_days is not None and self.min_days > self.max_days:
            raise ValidationError({"delivery_timeframe": ["Minimum days cannot exceed maximum days"]})


@shipping.value_object(part_of="Shipment")
class DeliveryConfirmation:
    received_by = String(max_length=200)
    delivery_location = String(max_length=200)
    signature = Text()
    delivery_photo = String(max_length=500)
    delivery_notes = String(max_length=500)


@shipping.value_object(part_of="Shipment")
class ReturnDetails:
    is_returned = Boolean(default=False)
    reason = String(max_length=50, choices=ReturnReason)
    returned_at = DateTime()
    return_tracking_number = String(max_length=255)


@shipping.value_object(part_of="Shipment")
class ShippingLabel:
    label_url = String(max_length=500)
    label_format = String(max_length=3, choices=LabelFormat, default=LabelFormat.PDF.value)
    created_at = DateTime()


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@shipping.entity(part_of="Shipment")
class TrackingEvent:
    """One timestamped entry in the shipment's tracking history."""

    status = String(required=True, max_length=50, choices=TrackingEventStatus)
    description = String(required=True, max_length=500)
    location = ValueObject(EventLocation)
    timestamp = DateTime(required=True)
    source = String(max_length=20, choices=EventSource, default=EventSource.API.value)


def _event_location(location) -> EventLocation | None:
    if location is None or isinstance(location, EventLocation):
        return location
    if not location:
        return None
    return EventLocation(**location)


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@shipping.aggregate
class Shipment:
    order_id = Identifier(required=True, unique=True)
    seller_id = Identifier(required=True)
    shipping_method = String(
        max_length=20,
        choices=ShippingMethod,
        default=ShippingMethod.STANDARD.value,
    )
    carrier = String(max_length=20, choices=Carrier, default=Carrier.LA_POSTE.value)
    carrier_service = String(max_length=100)
    tracking_number = String(required=True, max_length=255, unique=True)
    tracking_url = String(max_length=500)
    shipping_status = String(
        max_length=20,
        choices=ShippingStatus,
        default=ShippingStatus.PENDING.value,
    )
    shipping_address = ValueObject(DeliveryAddress, required=True)
    return_address = ValueObject(DeliveryAddress, required=True)
    package = ValueObject(PackageDetails, required=True)
    shipping_cost = Float(required=True, min_value=0.0)
    insurance = ValueObject(Insurance)
    signature_required = Boolean(default=False)
    saturday_delivery = Boolean(default=False)
    shipped_at = DateTime()
    estimated_delivery_date = DateTime()
    actual_delivery_date = DateTime()
    delivery_timeframe = ValueObject(DeliveryTimeframe)
    tracking_events = HasMany(TrackingEvent)
    last_tracking_update = DateTime()
    delivery = ValueObject(DeliveryConfirmation)
    return_info = ValueObject(ReturnDetails)
    shipping_label = ValueObject(ShippingLabel)
    carrier_metadata = Dict()
    internal_notes = String(max_length=1000)
    auto_tracking = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def carrier_metadata_holds_supported_values(self):
        if self.carrier_metadata and not _is_metadata_value(self.carrier_metadata):
            raise ValidationError(
                {"carrier_metadata": ["Metadata values must be strings, numbers, booleans or nested mappings"]}
            )

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        order_id: str,
        seller_id: str,
        tracking_number: str,
        shipping_address: DeliveryAddress,
        return_address: DeliveryAddress,
        package: PackageDetails,
        shipping_cost: float,
        **details,
    ):
        """Open a shipment record for an order marked for fulfillment."""
        now = datetime.now(UTC)
        shipment = cls(
            order_id=order_id,
            seller_id=seller_id,
            tracking_number=tracking_number,
            shipping_address=shipping_address,
            return_address=return_address,
            package=package,
            shipping_cost=shipping_cost,
            created_at=now,
            updated_at=now,
            **details,
        )
        shipment.raise_(
            ShipmentCreated(
                shipment_id=str(shipment.id),
                order_id=order_id,
                seller_id=seller_id,
                carrier=shipment.carrier,
                tracking_number=tracking_number,
                shipping_method=shipment.shipping_method,
                created_at=now,
            )
        )
        return shipment

    # -------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------
    @property
    def is_in_transit(self) -> bool:
        return self.shipping_status in IN_TRANSIT_STATUSES

    @property
    def is_delivered(self) -> bool:
        return self.shipping_status == ShippingStatus.DELIVERED.value

    @property
    def actual_delivery_days(self) -> int | None:
        if self.shipped_at and self.actual_delivery_date:
            elapsed = as_utc(self.actual_delivery_date) - as_utc(self.shipped_at)
            return math.ceil(elapsed.total_seconds() / 86400)
        return None

    def _assert_accepts_updates(self) -> None:
        if terminal_states_enforced() and self.shipping_status in TERMINAL_STATUSES:
            raise ValidationError({"shipping_status": [f"Shipment is already {self.shipping_status}"]})

    def record_lifecycle_dates(self) -> None:
        """Stamp ship and delivery dates the first time their status is reached."""
        now = datetime.now(UTC)
        if self.shipping_status == ShippingStatus.SHIPPED.value and self.shipped_at is None:
            self.shipped_at = now
        if self.shipping_status == ShippingStatus.DELIVERED.value and self.actual_delivery_date is None:
            self.actual_delivery_date = now

    # -------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------
    def update_status(self, new_status: str, description: str = "", location=None):
        """Set the overall status and log it as a manual tracking event.

        Not persisted here; UpdateShippingStatus saves the result.
        """
        self._assert_accepts_updates()
        if new_status not in _SHIPPING_STATUSES:
            raise ValidationError({"shipping_status": [f"'{new_status}' is not a valid shipping status"]})
        event_location = _event_location(location)

        previous = self.shipping_status
        self.shipping_status = new_status
        self.raise_(
            ShippingStatusChanged(
                shipment_id=str(self.id),
                previous_status=previous,
                new_status=new_status,
                changed_at=datetime.now(UTC),
            )
        )

        event_status = event_status_for(new_status)
        if event_status is not None:
            self._append_tracking_event(
                event_status,
                description or f"Status updated to {new_status}",
                event_location,
            )
        self.record_lifecycle_dates()
        return self

    # -------------------------------------------------------------------
    # Tracking
    # -------------------------------------------------------------------
    def add_tracking_event(
        self,
        status: str,
        description: str,
        location=None,
        timestamp: datetime | None = None,
        source: str = EventSource.MANUAL.value,
    ):
        """Append a tracking event; does not persist.

        Event statuses listed in EVENT_STATUS_MAPPING also overwrite the
        overall shipping status.
        """
        self._assert_accepts_updates()
        return self._append_tracking_event(status, description, location, timestamp, source)

    def _append_tracking_event(self, status, description, location=None, timestamp=None, source=None):
        now = datetime.now(UTC)
        event_location = _event_location(location)
        self.add_tracking_events(
            TrackingEvent(
                status=status,
                description=description,
                location=event_location,
                timestamp=timestamp or now,
                source=source or EventSource.MANUAL.value,
            )
        )
        self.last_tracking_update = now

        mapped = EVENT_STATUS_MAPPING.get(status)
        if mapped:
            self.shipping_status = mapped
        self.record_lifecycle_dates()
        self.updated_at = now

        self.raise_(
            TrackingEventRecorded(
                shipment_id=str(self.id),
                tracking_number=self.tracking_number,
                status=status,
                description=description,
                location=json.dumps(event_location.to_dict()) if event_location else "",
                source=source or EventSource.MANUAL.value,
                shipping_status=self.shipping_status,
                occurred_at=timestamp or now,
            )
        )
        return self

    def latest_tracking_event(self) -> TrackingEvent | None:
        """Most recent event by timestamp; stored order is left untouched."""
        return max(self.tracking_events or [], key=lambda e: as_utc(e.timestamp), default=None)

    def generate_tracking_url(self) -> str:
        """Build the carrier tracking URL; unmapped carriers yield ''."""
        template = TRACKING_URL_TEMPLATES.get(self.carrier)
        self.tracking_url = template.format(tracking_number=self.tracking_number) if template else ""
        return self.tracking_url

    # -------------------------------------------------------------------
    # Delivery estimation
    # -------------------------------------------------------------------
    def calculate_estimated_delivery(self) -> datetime | None:
        """Count business days forward from the ship date.

        Sundays never count; Saturdays count only with Saturday delivery.
        """
        if not self.shipped_at or not self.delivery_timeframe:
            return None

        max_days = self.delivery_timeframe.max_days or DEFAULT_DELIVERY_DAYS
        delivery_date = self.shipped_at
        days_added = 0
        while days_added < max_days:
            delivery_date += timedelta(days=1)
            weekday = delivery_date.weekday()
            if weekday != 6 and (weekday != 5 or self.saturday_delivery):
                days_added += 1

        self.estimated_delivery_date = delivery_date
        return delivery_date

    def schedule_delivery(self, min_days: int | None, max_days: int | None) -> datetime | None:
        """Set the delivery time-frame and recompute the estimate."""
        now = datetime.now(UTC)
        self.delivery_timeframe = DeliveryTimeframe(min_days=min_days, max_days=max_days)
        estimate = self.calculate_estimated_delivery()
        self.updated_at = now
        self.raise_(
            DeliveryScheduled(
                shipment_id=str(self.id),
                max_days=max_days or DEFAULT_DELIVERY_DAYS,
                estimated_delivery_date=estimate,
                scheduled_at=now,
            )
        )
        return estimate

    def is_late(self) -> bool:
        if not self.estimated_delivery_date or self.is_delivered:
            return False
        return datetime.now(UTC) > as_utc(self.estimated_delivery_date)

    # -------------------------------------------------------------------
    # Delivery and returns
    # -------------------------------------------------------------------
    def mark_as_delivered(
        self,
        received_by: str = "",
        delivery_location: str = "",
        signature: str = "",
        photo: str = "",
        notes: str = "",
    ):
        """Confirm delivery; always overwrites the actual delivery date."""
        self._assert_accepts_updates()
        now = datetime.now(UTC)
        self.shipping_status = ShippingStatus.DELIVERED.value
        self.actual_delivery_date = now
        self.delivery = DeliveryConfirmation(
            received_by=received_by,
            delivery_location=delivery_location,
            signature=signature,
            delivery_photo=photo,
            delivery_notes=notes,
        )
        description = f"Package delivered to {received_by}" if received_by else "Package delivered"
        self._append_tracking_event(TrackingEventStatus.DELIVERED.value, description, timestamp=now)
        self.raise_(
            ShipmentDelivered(
                shipment_id=str(self.id),
                order_id=str(self.order_id),
                received_by=received_by,
                delivered_at=now,
            )
        )
        return self

    def process_return(self, reason: str, return_tracking_number: str = ""):
        """Record the parcel's return to the seller."""
        self._assert_accepts_updates()
        if reason not in _RETURN_REASONS:
            raise ValidationError({"reason": [f"'{reason}' is not a valid return reason"]})

        now = datetime.now(UTC)
        self.return_info = ReturnDetails(
            is_returned=True,
            reason=reason,
            returned_at=now,
            return_tracking_number=return_tracking_number,
        )
        self.shipping_status = ShippingStatus.RETURNED.value
        self._append_tracking_event(
            TrackingEventStatus.RETURNED.value,
            f"Package returned - reason: {reason}",
            timestamp=now,
        )
        self.raise_(
            ShipmentReturned(
                shipment_id=str(self.id),
                order_id=str(self.order_id),
                reason=reason,
                return_tracking_number=return_tracking_number,
                returned_at=now,
            )
        )
        return self

    # -------------------------------------------------------------------
    # Label
    # -------------------------------------------------------------------
    def attach_label(self, label_url: str, label_format: str = LabelFormat.PDF.value) -> None:
        now = datetime.now(UTC)
        self.shipping_label = ShippingLabel(label_url=label_url, label_format=label_format, created_at=now)
        self.updated_at = now
        self.raise_(
            ShippingLabelAttached(
                shipment_id=str(self.id),
                label_url=label_url,
                label_format=label_format,
                attached_at=now,
            )
        )
