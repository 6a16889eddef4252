"""Faker-based data generators for the shipping load test scenarios.

Payloads match the field names of the API's Pydantic request schemas and
pass the domain's validation rules (carrier and method choices, non-negative
weights and costs, min_days <= max_days).
"""

import random
import uuid

from faker import Faker

fake = Faker("fr_FR")

CARRIERS = ["La Poste", "Chronopost", "DHL", "UPS", "FedEx", "TNT", "Mondial Relay"]
SHIPPING_METHODS = ["Standard", "Express", "Premium", "Same Day"]
TRACKING_STATUSES = ["picked_up", "in_transit", "out_for_delivery"]
RETURN_REASONS = ["refused_by_recipient", "incorrect_address", "damaged_package", "customer_request", "other"]


def tracking_number() -> str:
    """Generate unique tracking numbers like 'LT6F1A2B3C4D'."""
    return f"LT{uuid.uuid4().hex[:10].upper()}"


def address_data() -> dict:
    """Generate an AddressRequest payload."""
    return {
        "first_name": fake.first_name()[:50],
        "last_name": fake.last_name()[:50],
        "street": fake.street_address()[:255],
        "city": fake.city()[:100],
        "region": fake.region()[:100],
        "postal_code": fake.postcode(),
        "country": "France",
        "phone": fake.phone_number(),
        "email": fake.free_email(),
    }


def package_data() -> dict:
    return {
        "weight": random.randint(100, 20000),
        "weight_unit": "g",
        "dimensions": {
            "length": random.randint(10, 80),
            "width": random.randint(10, 60),
            "height": random.randint(5, 40),
            "unit": "cm",
        },
        "declared_value": round(random.uniform(5.0, 500.0), 2),
        "currency": "EUR",
        "description": fake.sentence(nb_words=4)[:255],
    }


def shipment_data() -> dict:
    """Generate a CreateShipmentRequest payload."""
    min_days = random.randint(1, 3)
    return {
        "order_id": str(uuid.uuid4()),
        "seller_id": f"seller-{random.randint(1, 20)}",
        "tracking_number": tracking_number(),
        "carrier": random.choice(CARRIERS),
        "shipping_method": random.choice(SHIPPING_METHODS),
        "shipping_address": address_data(),
        "return_address": address_data(),
        "package": package_data(),
        "shipping_cost": round(random.uniform(3.0, 40.0), 2),
        "delivery_timeframe": {"min_days": min_days, "max_days": min_days + random.randint(0, 5)},
        "saturday_delivery": random.random() < 0.2,
    }


def tracking_event_data(status: str | None = None) -> dict:
    """Generate a TrackingEventRequest payload."""
    return {
        "status": status or random.choice(TRACKING_STATUSES),
        "description": fake.sentence(nb_words=5),
        "location": {"city": fake.city(), "country": "France", "facility": f"Hub {fake.city()}"},
    }


def delivery_data() -> dict:
    return {
        "received_by": fake.name(),
        "delivery_location": random.choice(["Front door", "Mailbox", "Reception", "Neighbour"]),
    }


def return_data() -> dict:
    return {
        "reason": random.choice(RETURN_REASONS),
        "return_tracking_number": tracking_number(),
    }
