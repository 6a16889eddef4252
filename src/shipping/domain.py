"""Shipping bounded context: shipment records and carrier tracking.

Keeps one Shipment aggregate per order: its status, the tracking-event
history reported by carriers or operators, delivery confirmation, returns,
and delivery-date estimation. Uses CQRS; carriers own the physical state.
"""

from protean.domain import Domain

shipping = Domain(name="shipping")
