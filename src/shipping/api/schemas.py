"""Pydantic API schemas for the Shipping domain.

These are the external API contracts, separate from domain commands.
The API layer translates between these schemas and domain commands.
"""

from datetime import datetime

from pydantic import BaseModel


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class AddressRequest(BaseModel):
    first_name: str
    last_name: str
    company: str | None = None
    street: str
    street2: str | None = None
    city: str
    region: str
    postal_code: str
    country: str = "France"
    phone: str | None = None
    email: str | None = None
    instructions: str | None = None


class DimensionsRequest(BaseModel):
    length: float | None = None
    width: float | None = None
    height: float | None = None
    unit: str = "cm"


class PackageRequest(BaseModel):
    weight: float
    weight_unit: str = "g"
    dimensions: DimensionsRequest | None = None
    declared_value: float
    currency: str = "EUR"
    description: str


class InsuranceRequest(BaseModel):
    is_insured: bool = False
    insured_value: float | None = None
    cost: float | None = None


class TimeframeRequest(BaseModel):
    min_days: int | None = None
    max_days: int | None = None


class LocationRequest(BaseModel):
    city: str | None = None
    region: str | None = None
    country: str | None = None
    facility: str | None = None


class CreateShipmentRequest(BaseModel):
    order_id: str
    seller_id: str
    tracking_number: str
    carrier: str | None = None
    carrier_service: str | None = None
    shipping_method: str | None = None
    tracking_url: str | None = None
    shipping_address: AddressRequest
    return_address: AddressRequest
    package: PackageRequest
    shipping_cost: float
    insurance: InsuranceRequest | None = None
    delivery_timeframe: TimeframeRequest | None = None
    signature_required: bool = False
    saturday_delivery: bool = False
    carrier_metadata: dict | None = None
    internal_notes: str | None = None
    auto_tracking: bool = True


class UpdateStatusRequest(BaseModel):
    status: str
    description: str | None = None
    location: LocationRequest | None = None


class TrackingEventRequest(BaseModel):
    status: str
    description: str
    location: LocationRequest | None = None
    timestamp: datetime | None = None


class TrackingWebhookRequest(TrackingEventRequest):
    tracking_number: str


class MarkDeliveredRequest(BaseModel):
    received_by: str | None = None
    delivery_location: str | None = None
    signature: str | None = None
    photo: str | None = None
    notes: str | None = None


class ProcessReturnRequest(BaseModel):
    reason: str
    return_tracking_number: str | None = None


class GenerateLabelRequest(BaseModel):
    label_format: str = "PDF"


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class ShipmentIdResponse(BaseModel):
    shipment_id: str


class StatusResponse(BaseModel):
    status: str


class LabelResponse(BaseModel):
    label_url: str


class SyncResponse(BaseModel):
    events_added: int


class ShippingStatsResponse(BaseModel):
    total_shipments: int
    delivered_count: int
    in_transit_count: int
    failed_count: int
    average_delivery_days: float | None
    carrier_breakdown: list[str]
