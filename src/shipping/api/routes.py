"""FastAPI routes for the Shipping domain."""

import json
from datetime import datetime

from fastapi import APIRouter, Header, HTTPException
from protean.utils.globals import current_domain

from shipping.api.schemas import (
    CreateShipmentRequest,
    GenerateLabelRequest,
    LabelResponse,
    MarkDeliveredRequest,
    ProcessReturnRequest,
    ShipmentIdResponse,
    ShippingStatsResponse,
    StatusResponse,
    SyncResponse,
    TimeframeRequest,
    TrackingEventRequest,
    TrackingWebhookRequest,
    UpdateStatusRequest,
)
from shipping.carrier import get_carrier
from shipping.shipment.creation import CreateShipment
from shipping.shipment.delivery import MarkAsDelivered, ScheduleDelivery
from shipping.shipment.labels import GenerateShippingLabel
from shipping.shipment.reporting import late_shipments, shipment_detail, shipping_stats
from shipping.shipment.returns import ProcessReturn
from shipping.shipment.shipment import EventSource, Shipment
from shipping.shipment.status import UpdateShippingStatus
from shipping.shipment.tracking import RecordTrackingEvent, SyncCarrierTracking


def _json(model) -> str | None:
    return json.dumps(model.model_dump(exclude_none=True)) if model is not None else None


# ---------------------------------------------------------------------------
# Shipment Router
# ---------------------------------------------------------------------------
shipment_router = APIRouter(prefix="/shipments", tags=["shipments"])


@shipment_router.post("", status_code=201, response_model=ShipmentIdResponse)
async def create_shipment(body: CreateShipmentRequest) -> ShipmentIdResponse:
    """Open a shipment for an order marked for fulfillment."""
    command = CreateShipment(
        order_id=body.order_id,
        seller_id=body.seller_id,
        tracking_number=body.tracking_number,
        carrier=body.carrier,
        carrier_service=body.carrier_service,
        shipping_method=body.shipping_method,
        tracking_url=body.tracking_url,
        shipping_address=_json(body.shipping_address),
        return_address=_json(body.return_address),
        package=_json(body.package),
        shipping_cost=body.shipping_cost,
        insurance=_json(body.insurance),
        delivery_timeframe=_json(body.delivery_timeframe),
        signature_required=body.signature_required,
        saturday_delivery=body.saturday_delivery,
        carrier_metadata=json.dumps(body.carrier_metadata) if body.carrier_metadata else None,
        internal_notes=body.internal_notes,
        auto_tracking=body.auto_tracking,
    )
    result = current_domain.process(command, asynchronous=False)
    return ShipmentIdResponse(shipment_id=result)


@shipment_router.get("/late")
async def list_late_shipments() -> list[dict]:
    """In-flight shipments past their estimated delivery date."""
    return late_shipments()


@shipment_router.get("/stats", response_model=ShippingStatsResponse)
async def get_shipping_stats(
    seller_id: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> ShippingStatsResponse:
    """Shipping statistics, optionally per seller and ship-date range."""
    return ShippingStatsResponse(**shipping_stats(seller_id, start_date, end_date))


@shipment_router.get("/tracking/{tracking_number}")
async def get_shipment_by_tracking_number(tracking_number: str) -> dict:
    shipment = current_domain.repository_for(Shipment).find_by_tracking_number(tracking_number)
    if shipment is None:
        raise HTTPException(status_code=404, detail="Unknown tracking number")
    return shipment_detail(shipment)


@shipment_router.post("/tracking/webhook", response_model=StatusResponse)
async def tracking_webhook(
    body: TrackingWebhookRequest,
    x_carrier_signature: str = Header(default=""),
) -> StatusResponse:
    """Process a carrier tracking webhook callback."""
    carrier = get_carrier()
    if not carrier.verify_webhook_signature(json.dumps(body.model_dump(mode="json")), x_carrier_signature):
        raise HTTPException(status_code=401, detail="Invalid carrier webhook signature")

    command = RecordTrackingEvent(
        tracking_number=body.tracking_number,
        status=body.status,
        description=body.description,
        location=_json(body.location),
        timestamp=body.timestamp,
        source=EventSource.WEBHOOK.value,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="tracking_updated")


@shipment_router.get("/{shipment_id}")
async def get_shipment(shipment_id: str) -> dict:
    shipment = current_domain.repository_for(Shipment).get(shipment_id)
    return shipment_detail(shipment)


@shipment_router.put("/{shipment_id}/status")
async def update_status(shipment_id: str, body: UpdateStatusRequest) -> dict:
    """Set the overall status; the change is logged as a manual tracking event."""
    command = UpdateShippingStatus(
        shipment_id=shipment_id,
        status=body.status,
        description=body.description,
        location=_json(body.location),
    )
    shipment = current_domain.process(command, asynchronous=False)
    return shipment_detail(shipment)


@shipment_router.post("/{shipment_id}/tracking-events", status_code=201, response_model=StatusResponse)
async def add_tracking_event(shipment_id: str, body: TrackingEventRequest) -> StatusResponse:
    command = RecordTrackingEvent(
        shipment_id=shipment_id,
        status=body.status,
        description=body.description,
        location=_json(body.location),
        timestamp=body.timestamp,
        source=EventSource.API.value,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="tracking_event_recorded")


@shipment_router.put("/{shipment_id}/sync", response_model=SyncResponse)
async def sync_carrier_tracking(shipment_id: str) -> SyncResponse:
    """Pull new events from the carrier feed."""
    added = current_domain.process(SyncCarrierTracking(shipment_id=shipment_id), asynchronous=False)
    return SyncResponse(events_added=added)


@shipment_router.put("/{shipment_id}/deliver", response_model=StatusResponse)
async def mark_as_delivered(shipment_id: str, body: MarkDeliveredRequest) -> StatusResponse:
    command = MarkAsDelivered(
        shipment_id=shipment_id,
        received_by=body.received_by,
        delivery_location=body.delivery_location,
        signature=body.signature,
        photo=body.photo,
        notes=body.notes,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="delivered")


@shipment_router.put("/{shipment_id}/return", response_model=StatusResponse)
async def process_return(shipment_id: str, body: ProcessReturnRequest) -> StatusResponse:
    command = ProcessReturn(
        shipment_id=shipment_id,
        reason=body.reason,
        return_tracking_number=body.return_tracking_number,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="returned")


@shipment_router.put("/{shipment_id}/schedule")
async def schedule_delivery(shipment_id: str, body: TimeframeRequest) -> dict:
    """Set the delivery time-frame; returns the recomputed estimate."""
    command = ScheduleDelivery(
        shipment_id=shipment_id,
        min_days=body.min_days,
        max_days=body.max_days,
    )
    shipment = current_domain.process(command, asynchronous=False)
    return {"estimated_delivery_date": shipment.estimated_delivery_date}


@shipment_router.put("/{shipment_id}/label", response_model=LabelResponse)
async def generate_label(shipment_id: str, body: GenerateLabelRequest) -> LabelResponse:
    command = GenerateShippingLabel(shipment_id=shipment_id, label_format=body.label_format)
    label_url = current_domain.process(command, asynchronous=False)
    return LabelResponse(label_url=label_url)
