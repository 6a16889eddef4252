"""Domain tests for explicit status updates and the status-to-event mapping."""

import pytest
from protean.exceptions import ValidationError
from shipping.shipment.events import ShippingStatusChanged, TrackingEventRecorded
from shipping.shipment.shipment import ShippingStatus, event_status_for


class TestEventStatusFor:
    @pytest.mark.parametrize(
        "status, expected",
        [
            ("In Transit", "in_transit"),
            ("Out for Delivery", "out_for_delivery"),
            ("Delivered", "delivered"),
            ("Returned", "returned"),
            ("Lost", "lost"),
            ("Damaged", "damaged"),
            ("Ready to Ship", "label_created"),
            ("Shipped", "picked_up"),
            ("Delivery Failed", "exception"),
        ],
    )
    def test_mapped_statuses(self, status, expected):
        assert event_status_for(status) == expected

    @pytest.mark.parametrize("status", ["Pending", "Processing", "Cancelled"])
    def test_statuses_without_tracking_counterpart(self, status):
        assert event_status_for(status) is None


class TestUpdateStatus:
    def test_sets_status_and_logs_manual_event(self, shipment):
        shipment.update_status("In Transit", "Left sorting centre", {"city": "Lyon", "facility": "PIC Lyon"})

        assert shipment.shipping_status == ShippingStatus.IN_TRANSIT.value
        assert len(shipment.tracking_events) == 1
        event = shipment.tracking_events[0]
        assert event.status == "in_transit"
        assert event.description == "Left sorting centre"
        assert event.source == "manual"
        assert event.location.facility == "PIC Lyon"
        assert shipment.last_tracking_update is not None

    def test_default_description(self, shipment):
        shipment.update_status("Out for Delivery")
        assert shipment.tracking_events[0].description == "Status updated to Out for Delivery"

    def test_shipped_stamps_ship_date(self, shipment):
        shipment.update_status("Shipped")
        assert shipment.shipping_status == ShippingStatus.SHIPPED.value
        assert shipment.shipped_at is not None
        assert shipment.tracking_events[0].status == "picked_up"

    def test_ship_date_kept_on_repeat(self, shipment):
        shipment.update_status("Shipped")
        first = shipment.shipped_at
        shipment.update_status("In Transit")
        shipment.update_status("Shipped")
        assert shipment.shipped_at == first

    def test_delivered_stamps_delivery_date(self, shipment):
        shipment.update_status("Delivered")
        assert shipment.actual_delivery_date is not None
        assert shipment.is_delivered

    @pytest.mark.parametrize("status", ["Pending", "Processing", "Cancelled"])
    def test_no_tracking_event_for_unmapped_status(self, shipment, status):
        shipment.update_status(status)
        assert shipment.shipping_status == status
        assert shipment.tracking_events == []

    def test_invalid_status_rejected(self, shipment):
        with pytest.raises(ValidationError) as exc:
            shipment.update_status("Teleported")
        assert "not a valid shipping status" in str(exc.value)
        assert shipment.shipping_status == ShippingStatus.PENDING.value

    def test_invalid_location_leaves_shipment_untouched(self, shipment):
        with pytest.raises(ValidationError):
            shipment.update_status("In Transit", "Hub", {"bogus": 1})
        assert shipment.shipping_status == ShippingStatus.PENDING.value
        assert shipment.tracking_events == []
        assert shipment._events == []

    def test_raises_status_changed_and_tracking_events(self, shipment):
        shipment.update_status("Shipped")
        kinds = [type(e) for e in shipment._events]
        assert kinds == [ShippingStatusChanged, TrackingEventRecorded]
        changed = shipment._events[0]
        assert changed.previous_status == "Pending"
        assert changed.new_status == "Shipped"


class TestTerminalStatePolicy:
    def test_permissive_by_default(self, shipment):
        shipment.update_status("Delivered")
        shipment.update_status("In Transit")
        assert shipment.shipping_status == ShippingStatus.IN_TRANSIT.value

    @pytest.mark.parametrize("terminal", ["Delivered", "Returned", "Lost", "Damaged", "Cancelled"])
    def test_enforced_policy_rejects_updates(self, shipment, monkeypatch, terminal):
        shipment.shipping_status = terminal
        monkeypatch.setenv("SHIPPING_ENFORCE_TERMINAL_STATES", "true")

        with pytest.raises(ValidationError):
            shipment.update_status("In Transit")
        with pytest.raises(ValidationError):
            shipment.add_tracking_event("in_transit", "Scanned")
        with pytest.raises(ValidationError):
            shipment.mark_as_delivered()
        with pytest.raises(ValidationError):
            shipment.process_return("other")

    def test_enforced_policy_allows_open_shipments(self, shipment, monkeypatch):
        monkeypatch.setenv("SHIPPING_ENFORCE_TERMINAL_STATES", "true")
        shipment.update_status("Shipped")
        assert shipment.shipping_status == ShippingStatus.SHIPPED.value
