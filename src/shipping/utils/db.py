"""Schema management for relational providers (sqlite, postgresql)."""

from protean.domain import Domain
from sqlalchemy import create_engine

_RELATIONAL = ("sqlite", "postgresql")


def _load_models(domain: Domain, provider_name: str) -> None:
    # Accessing _dao registers the element's table on the provider metadata.
    registry = domain.registry
    for records in (registry.aggregates, registry.entities, registry.projections):
        for _, record in records.items():
            if record.cls.meta_.provider == provider_name:
                domain.repository_for(record.cls)._dao  # noqa: B018


def setup_db(domain: Domain) -> list[str]:
    """Create shipment, tracking-event and projection tables.

    Returns the names of the providers that were set up.
    """
    prepared = []
    with domain.domain_context():
        for name, provider in domain.providers.items():
            if provider.conn_info["provider"] not in _RELATIONAL:
                continue
            engine = create_engine(provider.conn_info["database_uri"])
            _load_models(domain, name)
            provider._metadata.create_all(engine)
            prepared.append(name)
    return prepared


def drop_db(domain: Domain) -> list[str]:
    """Drop every table known to the relational providers."""
    dropped = []
    with domain.domain_context():
        for name, provider in domain.providers.items():
            if provider.conn_info["provider"] not in _RELATIONAL:
                continue
            engine = create_engine(provider.conn_info["database_uri"])
            _load_models(domain, name)
            provider._metadata.drop_all(engine)
            dropped.append(name)
    return dropped
