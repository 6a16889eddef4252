"""Shipping service FastAPI application.

Processes shipment commands synchronously over HTTP inside the shipping
domain context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay from domain.toml ("test",
# "production", ...).
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers
from shipping.domain import shipping
from shipping.utils.logging import clear_context, configure_logging

configure_logging()
shipping.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Shipping API",
    description="Shipment tracking, delivery confirmation and returns",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Run shipment requests inside the shipping domain context."""
    if not request.url.path.startswith("/shipments"):
        return await call_next(request)
    with shipping.domain_context():
        try:
            return await call_next(request)
        finally:
            clear_context()


# ---------------------------------------------------------------------------
# Routers and error mapping
# ---------------------------------------------------------------------------
from shipping.api import register_conflict_handler, shipment_router  # noqa: E402

app.include_router(shipment_router)
register_exception_handlers(app)
register_conflict_handler(app)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": shipping.name})
