"""BDD tests for the shipment lifecycle."""

from pytest_bdd import parsers, scenarios, then, when

scenarios("features/shipment_lifecycle.feature")


@when(parsers.cfparse('the shipment is marked as delivered to "{recipient}"'), target_fixture="shp")
def mark_delivered(shp, recipient):
    shp.mark_as_delivered(received_by=recipient)
    return shp


@then("the ship date is recorded")
def ship_date_recorded(shp):
    assert shp.shipped_at is not None


@then("the delivery date is recorded")
def delivery_date_recorded(shp):
    assert shp.actual_delivery_date is not None
    assert shp.actual_delivery_days is not None
