"""Read queries over shipments: late shipments, shipping statistics, detail view.

These run directly against the Shipment repository; order and seller ids are
resolved through the reference directory for display.
"""

from datetime import datetime

from protean.utils.globals import current_domain

from shipping.directory import get_directory
from shipping.shipment.shipment import Shipment, ShippingStatus, as_utc


def shipment_detail(shipment: Shipment) -> dict:
    """Stored fields plus the derived flags clients display."""
    latest = shipment.latest_tracking_event()
    detail = shipment.to_dict()
    detail.update(
        {
            "is_in_transit": shipment.is_in_transit,
            "is_delivered": shipment.is_delivered,
            "is_late": shipment.is_late(),
            "actual_delivery_days": shipment.actual_delivery_days,
            "latest_tracking_event": latest.to_dict() if latest else None,
        }
    )
    return detail


def late_shipments(now: datetime | None = None) -> list[dict]:
    directory = get_directory()
    rows = []
    for shipment in current_domain.repository_for(Shipment).late(now):
        row = shipment_detail(shipment)
        row["order"] = directory.order_summary(str(shipment.order_id))
        row["seller"] = directory.seller_summary(str(shipment.seller_id))
        rows.append(row)
    return rows


def shipping_stats(
    seller_id: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> dict:
    """Counts, mean delivery time and carrier list over matching shipments.

    average_delivery_days is None when shipments match but none has both a
    ship and an actual delivery date.
    """
    shipments = current_domain.repository_for(Shipment).matching(seller_id, start_date, end_date)
    if not shipments:
        return {
            "total_shipments": 0,
            "delivered_count": 0,
            "in_transit_count": 0,
            "failed_count": 0,
            "average_delivery_days": 0,
            "carrier_breakdown": [],
        }

    durations = [
        (as_utc(s.actual_delivery_date) - as_utc(s.shipped_at)).total_seconds() / 86400
        for s in shipments
        if s.shipped_at and s.actual_delivery_date
    ]
    return {
        "total_shipments": len(shipments),
        "delivered_count": sum(1 for s in shipments if s.is_delivered),
        "in_transit_count": sum(1 for s in shipments if s.is_in_transit),
        "failed_count": sum(1 for s in shipments if s.shipping_status == ShippingStatus.DELIVERY_FAILED.value),
        "average_delivery_days": sum(durations) / len(durations) if durations else None,
        "carrier_breakdown": [s.carrier for s in shipments],
    }
