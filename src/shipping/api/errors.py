"""HTTP mapping for shipping errors not covered by Protean's handlers."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from shipping.shipment.errors import DuplicateShipmentError


def register_conflict_handler(app: FastAPI) -> None:
    """Answer uniqueness conflicts with 409, naming the clashing field."""

    @app.exception_handler(DuplicateShipmentError)
    async def duplicate_shipment_handler(_request: Request, exc: DuplicateShipmentError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"error": {exc.field_name: exc.message}})
