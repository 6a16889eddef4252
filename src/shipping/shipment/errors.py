"""Shipment-specific domain errors."""

from protean.exceptions import ValidationError


class DuplicateShipmentError(ValidationError):
    """A shipment already uses this order reference or tracking number."""

    def __init__(self, field_name: str, value: str):
        self.field_name = field_name
        self.message = f"Shipment with {field_name} '{value}' already exists"
        super().__init__({field_name: [self.message]})
