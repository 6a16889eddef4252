"""Interface every carrier integration implements.

Shipment handlers program against the port; the adapter is picked through
configuration.
"""

from abc import ABC, abstractmethod


class CarrierPort(ABC):
    @abstractmethod
    def create_label(self, tracking_number: str, carrier: str, label_format: str = "PDF") -> dict:
        """Produce a printable label for a parcel.

        Returns:
            dict with keys: label_url, and error when the carrier refused
        """
        ...

    @abstractmethod
    def get_tracking(self, tracking_number: str) -> dict:
        """Fetch the carrier's event feed for a parcel.

        Returns:
            dict with keys: status, events (list of dicts with status,
            description, location, occurred_at as ISO 8601), and error on
            failure
        """
        ...

    @abstractmethod
    def verify_webhook_signature(self, payload: str, signature: str) -> bool:
        """Check that a tracking webhook really comes from the carrier."""
        ...
