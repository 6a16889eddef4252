"""Shared BDD fixtures and step definitions for the Shipping domain."""

import pytest
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when
from shipping.shipment.events import ShipmentDelivered, ShipmentReturned, TrackingEventRecorded

_SHIPMENT_EVENT_CLASSES = {
    "ShipmentDelivered": ShipmentDelivered,
    "ShipmentReturned": ShipmentReturned,
    "TrackingEventRecorded": TrackingEventRecorded,
}


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a pending shipment with carrier "{carrier}"'), target_fixture="shp")
def pending_shipment(build_shipment, carrier):
    return build_shipment(carrier=carrier)


@given("an in-transit shipment", target_fixture="shp")
def in_transit_shipment(build_shipment):
    shp = build_shipment()
    shp.update_status("Shipped")
    shp.add_tracking_event("in_transit", "Departed sorting centre", {"city": "Lyon"})
    shp._events.clear()
    return shp


@given("a delivered shipment", target_fixture="shp")
def delivered_shipment(build_shipment):
    shp = build_shipment()
    shp.update_status("Shipped")
    shp.mark_as_delivered(received_by="Camille Durand")
    shp._events.clear()
    return shp


@given("terminal states are enforced")
def enforce_terminal_states(monkeypatch):
    monkeypatch.setenv("SHIPPING_ENFORCE_TERMINAL_STATES", "true")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the status is updated to "{status}"'), target_fixture="shp")
def update_status(shp, status):
    shp.update_status(status)
    return shp


@when(parsers.cfparse('a tracking event "{status}" is recorded at "{city}"'), target_fixture="shp")
def record_tracking_event(shp, status, city):
    shp.add_tracking_event(status, f"Scanned in {city}", {"city": city})
    return shp


@when(parsers.cfparse('a return is attempted with reason "{reason}"'))
def attempt_return(shp, reason, error):
    try:
        shp.process_return(reason)
    except ValidationError as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the shipping status is "{status}"'))
def shipping_status_is(shp, status):
    assert shp.shipping_status == status


@then(parsers.cfparse("the shipment has {count:d} tracking events"))
def tracking_event_count(shp, count):
    assert len(shp.tracking_events) == count


@then(parsers.cfparse('the shipment raised a "{event_type}" event'))
def shipment_raised_event(shp, event_type):
    event_cls = _SHIPMENT_EVENT_CLASSES[event_type]
    assert any(isinstance(e, event_cls) for e in shp._events)


@then(parsers.cfparse('the action fails with "{message}"'))
def action_fails(error, message):
    assert error["exc"] is not None
    assert message in str(error["exc"])
