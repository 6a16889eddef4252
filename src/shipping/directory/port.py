"""Reference directory port.

Orders and sellers live in other services; shipments only hold their ids.
Reports use this port to show a minimal description of each.
"""

from abc import ABC, abstractmethod


class ReferenceDirectory(ABC):
    @abstractmethod
    def order_summary(self, order_id: str) -> dict:
        """Returns dict with keys: id, order_number."""
        ...

    @abstractmethod
    def seller_summary(self, seller_id: str) -> dict:
        """Returns dict with keys: id, username, email."""
        ...
