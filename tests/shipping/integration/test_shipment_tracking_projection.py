"""Integration tests for the customer-facing shipment tracking view."""

import json

from protean import current_domain
from shipping.projections.shipment_tracking import ShipmentTrackingView
from shipping.shipment.delivery import MarkAsDelivered
from shipping.shipment.returns import ProcessReturn
from shipping.shipment.status import UpdateShippingStatus
from shipping.shipment.tracking import RecordTrackingEvent


def _view(shipment_id):
    return current_domain.repository_for(ShipmentTrackingView).get(shipment_id)


class TestShipmentTrackingView:
    def test_created_with_shipment(self, create_shipment):
        shipment_id = create_shipment(carrier="Chronopost")
        view = _view(shipment_id)
        assert view.order_id == "ord-001"
        assert view.carrier == "Chronopost"
        assert view.current_status == "Pending"
        assert json.loads(view.events_json) == []

    def test_tracking_events_build_history(self, create_shipment):
        shipment_id = create_shipment()
        current_domain.process(
            RecordTrackingEvent(
                shipment_id=shipment_id,
                status="picked_up",
                description="Collected",
                location=json.dumps({"city": "Lyon"}),
            ),
            asynchronous=False,
        )
        current_domain.process(
            UpdateShippingStatus(shipment_id=shipment_id, status="Out for Delivery"),
            asynchronous=False,
        )

        view = _view(shipment_id)
        history = json.loads(view.events_json)
        assert [h["status"] for h in history] == ["picked_up", "out_for_delivery"]
        assert history[0]["location"]["city"] == "Lyon"
        assert view.current_status == "Out for Delivery"
        assert json.loads(view.current_location)["city"] == "Lyon"

    def test_delivery(self, create_shipment):
        shipment_id = create_shipment()
        current_domain.process(MarkAsDelivered(shipment_id=shipment_id, received_by="Camille"), asynchronous=False)

        view = _view(shipment_id)
        assert view.current_status == "Delivered"
        assert view.delivered_at is not None

    def test_return(self, create_shipment):
        shipment_id = create_shipment()
        current_domain.process(ProcessReturn(shipment_id=shipment_id, reason="other"), asynchronous=False)

        view = _view(shipment_id)
        assert view.current_status == "Returned"
        assert view.returned_at is not None

    def test_status_change_without_tracking_event(self, create_shipment, load_shipment):
        shipment_id = create_shipment()
        current_domain.process(UpdateShippingStatus(shipment_id=shipment_id, status="Shipped"), asynchronous=False)
        current_domain.process(UpdateShippingStatus(shipment_id=shipment_id, status="Cancelled"), asynchronous=False)

        view = _view(shipment_id)
        assert view.current_status == "Cancelled"
        assert view.current_status == load_shipment(shipment_id).shipping_status
        assert [h["status"] for h in json.loads(view.events_json)] == ["picked_up"]
