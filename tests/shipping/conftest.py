"""Shared builders for shipping tests."""

import json

import pytest
from protean import current_domain
from shipping.shipment.creation import CreateShipment
from shipping.shipment.shipment import DeliveryAddress, PackageDetails, PackageDimensions, Shipment

ADDRESS = {
    "first_name": "Camille",
    "last_name": "Durand",
    "street": "12 rue des Lilas",
    "city": "Lyon",
    "region": "Auvergne-Rhône-Alpes",
    "postal_code": "69003",
    "country": "France",
    "email": "camille@example.com",
}

RETURN_ADDRESS = {
    "first_name": "Atelier",
    "last_name": "Bois",
    "company": "Atelier Bois SARL",
    "street": "4 avenue Jean Jaurès",
    "city": "Paris",
    "region": "Île-de-France",
    "postal_code": "75019",
}

PACKAGE = {
    "weight": 1200,
    "weight_unit": "g",
    "dimensions": {"length": 30, "width": 20, "height": 10, "unit": "cm"},
    "declared_value": 89.9,
    "currency": "EUR",
    "description": "Handmade oak serving board",
}


def build_shipment(
    order_id: str = "ord-001",
    tracking_number: str = "LP123456789FR",
    seller_id: str = "seller-001",
    shipping_cost: float = 6.5,
    **details,
) -> Shipment:
    """An unsaved shipment with realistic defaults; events are cleared."""
    dimensions = PACKAGE["dimensions"]
    package = {k: v for k, v in PACKAGE.items() if k != "dimensions"}
    shipment = Shipment.create(
        order_id=order_id,
        seller_id=seller_id,
        tracking_number=tracking_number,
        shipping_address=DeliveryAddress(**ADDRESS),
        return_address=DeliveryAddress(**RETURN_ADDRESS),
        package=PackageDetails(dimensions=PackageDimensions(**dimensions), **package),
        shipping_cost=shipping_cost,
        **details,
    )
    shipment._events.clear()
    return shipment


def create_shipment_command(
    order_id: str = "ord-001",
    tracking_number: str = "LP123456789FR",
    seller_id: str = "seller-001",
    **overrides,
) -> CreateShipment:
    fields = {
        "order_id": order_id,
        "seller_id": seller_id,
        "tracking_number": tracking_number,
        "shipping_address": json.dumps(ADDRESS),
        "return_address": json.dumps(RETURN_ADDRESS),
        "package": json.dumps(PACKAGE),
        "shipping_cost": 6.5,
    }
    fields.update(overrides)
    return CreateShipment(**fields)


def create_shipment(**kwargs) -> str:
    """Create and persist a shipment through the command path; returns its id."""
    return current_domain.process(create_shipment_command(**kwargs), asynchronous=False)


def load(shipment_id: str) -> Shipment:
    return current_domain.repository_for(Shipment).get(shipment_id)


@pytest.fixture()
def shipment():
    return build_shipment()


@pytest.fixture(name="build_shipment")
def build_shipment_fixture():
    return build_shipment


@pytest.fixture(name="create_shipment")
def create_shipment_fixture():
    return create_shipment


@pytest.fixture(name="load_shipment")
def load_shipment_fixture():
    return load
