from shipping.api.errors import register_conflict_handler
from shipping.api.routes import shipment_router

__all__ = ["register_conflict_handler", "shipment_router"]
