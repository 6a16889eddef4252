"""In-memory reference directory for tests and local development."""

from shipping.directory.port import ReferenceDirectory


class InMemoryDirectory(ReferenceDirectory):
    def __init__(self):
        self._orders: dict[str, str] = {}
        self._sellers: dict[str, tuple[str, str]] = {}

    def register_order(self, order_id: str, order_number: str) -> None:
        self._orders[str(order_id)] = order_number

    def register_seller(self, seller_id: str, username: str, email: str) -> None:
        self._sellers[str(seller_id)] = (username, email)

    def order_summary(self, order_id: str) -> dict:
        return {"id": str(order_id), "order_number": self._orders.get(str(order_id))}

    def seller_summary(self, seller_id: str) -> dict:
        username, email = self._sellers.get(str(seller_id), (None, None))
        return {"id": str(seller_id), "username": username, "email": email}
