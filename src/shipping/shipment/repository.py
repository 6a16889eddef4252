"""Repository for the Shipment aggregate.

Every save goes through ``add``, which applies the set-if-absent ship and
delivery date stamping and maintains the created/updated timestamps.
"""

from datetime import UTC, datetime

from protean.core.repository import BaseRepository

from shipping.domain import shipping
from shipping.shipment.shipment import IN_TRANSIT_STATUSES, Shipment, as_utc

_PAGE_SIZE = 100


@shipping.repository(part_of=Shipment)
class ShipmentRepository(BaseRepository):
    def add(self, item):
        item.record_lifecycle_dates()
        now = datetime.now(UTC)
        if item.created_at is None:
            item.created_at = now
        item.updated_at = now
        return super().add(item)

    def find_by_tracking_number(self, tracking_number: str) -> Shipment | None:
        return self._dao.query.filter(tracking_number=tracking_number).all().first

    def find_by_order(self, order_id: str) -> Shipment | None:
        return self._dao.query.filter(order_id=order_id).all().first

    def _scan(self, **filters) -> list[Shipment]:
        """Collect every shipment matching ``filters``, page by page."""
        query = self._dao.query.filter(**filters) if filters else self._dao.query
        shipments = []
        offset = 0
        while True:
            page = query.offset(offset).limit(_PAGE_SIZE).all()
            shipments.extend(page.items)
            if len(page.items) < _PAGE_SIZE:
                return shipments
            offset += _PAGE_SIZE

    def late(self, now: datetime | None = None) -> list[Shipment]:
        """Undelivered, in-flight shipments past their estimate, oldest estimate first."""
        now = as_utc(now) or datetime.now(UTC)
        in_flight = self._scan(shipping_status__in=list(IN_TRANSIT_STATUSES))
        late = [s for s in in_flight if s.estimated_delivery_date and as_utc(s.estimated_delivery_date) < now]
        return sorted(late, key=lambda s: as_utc(s.estimated_delivery_date))

    def matching(
        self,
        seller_id: str | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> list[Shipment]:
        """Shipments for a seller and/or shipped within an inclusive date range."""
        shipments = self._scan(seller_id=seller_id) if seller_id else self._scan()
        if start_date is None and end_date is None:
            return shipments

        start, end = as_utc(start_date), as_utc(end_date)
        selected = []
        for shipment in shipments:
            shipped_at = as_utc(shipment.shipped_at)
            if shipped_at is None:
                continue
            if start is not None and shipped_at < start:
                continue
            if end is not None and shipped_at > end:
                continue
            selected.append(shipment)
        return selected
