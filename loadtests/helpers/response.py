"""Response error extraction for load test observability.

Turns Shipping API error bodies into one-line messages. Three shapes occur:

- Pydantic validation (422): {"detail": [{"loc": [...], "msg": "..."}]}
- HTTPException (401, unknown tracking number 404): {"detail": "msg"}
- Domain errors (400/404/409): {"error": "msg"} or {"error": {"field": "msg"}}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response

_MAX_TEXT = 300


def _format_validation(details: list) -> str:
    parts = []
    for err in details:
        loc = ".".join(str(p) for p in err.get("loc", []))
        msg = err.get("msg", str(err))
        parts.append(f"{loc}: {msg}" if loc else msg)
    return " | ".join(parts)


def extract_error_detail(response: Response) -> str:
    """Compact error message suitable for Locust failures and log lines."""
    try:
        body = response.json()
    except ValueError:
        text = getattr(response, "text", "") or ""
        return text[:_MAX_TEXT] or "(empty response body)"

    if not isinstance(body, dict):
        return str(body)[:_MAX_TEXT]

    detail = body.get("detail")
    if isinstance(detail, list):
        return _format_validation(detail)
    if isinstance(detail, str):
        return detail

    if "error" in body:
        error = body["error"]
        if isinstance(error, dict):
            return " | ".join(f"{field}: {msg}" for field, msg in error.items())
        return str(error)

    return str(body)[:_MAX_TEXT]
