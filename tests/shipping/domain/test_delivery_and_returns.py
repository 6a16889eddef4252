"""Domain tests for delivery confirmation, returns and labels."""

from datetime import UTC, datetime

import pytest
from protean.exceptions import ValidationError
from shipping.shipment.events import ShipmentDelivered, ShipmentReturned, ShippingLabelAttached
from shipping.shipment.shipment import ShippingStatus


class TestMarkAsDelivered:
    def test_records_confirmation(self, shipment):
        shipment.mark_as_delivered(
            received_by="Camille Durand",
            delivery_location="Front door",
            signature="data:image/png;base64,AAAA",
            photo="https://photos.example.com/1.jpg",
            notes="Left at door",
        )
        assert shipment.shipping_status == ShippingStatus.DELIVERED.value
        assert shipment.delivery.received_by == "Camille Durand"
        assert shipment.delivery.delivery_location == "Front door"
        assert shipment.delivery.delivery_photo == "https://photos.example.com/1.jpg"
        assert shipment.delivery.delivery_notes == "Left at door"
        assert shipment.actual_delivery_date is not None

    def test_appends_delivered_event(self, shipment):
        shipment.mark_as_delivered(received_by="Camille")
        event = shipment.tracking_events[-1]
        assert event.status == "delivered"
        assert event.description == "Package delivered to Camille"

    def test_description_without_recipient(self, shipment):
        shipment.mark_as_delivered()
        assert shipment.tracking_events[-1].description == "Package delivered"

    def test_overwrites_delivery_date(self, shipment):
        old = datetime(2026, 1, 1, tzinfo=UTC)
        shipment.actual_delivery_date = old
        shipment.mark_as_delivered()
        assert shipment.actual_delivery_date > old

    def test_raises_shipment_delivered(self, shipment):
        shipment.mark_as_delivered(received_by="Camille")
        assert any(isinstance(e, ShipmentDelivered) for e in shipment._events)


class TestProcessReturn:
    def test_records_return(self, shipment):
        shipment.process_return("refused_by_recipient", "RET-001")

        assert shipment.shipping_status == ShippingStatus.RETURNED.value
        assert shipment.return_info.is_returned is True
        assert shipment.return_info.reason == "refused_by_recipient"
        assert shipment.return_info.return_tracking_number == "RET-001"
        assert shipment.return_info.returned_at is not None

    def test_return_appends_exactly_one_event(self, shipment):
        shipment.add_tracking_event("in_transit", "Hub")
        shipment.process_return("other", "RT123")

        assert shipment.return_info.is_returned is True
        assert shipment.shipping_status == "Returned"
        assert len(shipment.tracking_events) == 2

    def test_appends_single_returned_event(self, shipment):
        shipment.process_return("incorrect_address")
        returned = [e for e in shipment.tracking_events if e.status == "returned"]
        assert len(returned) == 1
        assert returned[0].description == "Package returned - reason: incorrect_address"

    def test_invalid_reason_rejected(self, shipment):
        with pytest.raises(ValidationError):
            shipment.process_return("changed_my_mind")
        assert shipment.shipping_status == ShippingStatus.PENDING.value
        assert shipment.tracking_events == []

    def test_raises_shipment_returned(self, shipment):
        shipment.process_return("other")
        event = next(e for e in shipment._events if isinstance(e, ShipmentReturned))
        assert event.reason == "other"


class TestAttachLabel:
    def test_attaches_label(self, shipment):
        shipment.attach_label("https://labels.example.com/lp.pdf")
        assert shipment.shipping_label.label_url == "https://labels.example.com/lp.pdf"
        assert shipment.shipping_label.label_format == "PDF"
        assert shipment.shipping_label.created_at is not None
        assert isinstance(shipment._events[-1], ShippingLabelAttached)

    def test_invalid_format_rejected(self, shipment):
        with pytest.raises(ValidationError):
            shipment.attach_label("https://labels.example.com/lp.gif", "GIF")
