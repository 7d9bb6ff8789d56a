"""Response error extraction for load test observability.

Parses marketplace API error responses into human-readable messages.
Handles these response shapes:

- Pydantic validation (422): {"detail": [{"loc": [...], "msg": "...", "type": "..."}]}
- Identity headers (401): {"detail": "msg"}
- Domain errors (400/403/404/409): {"error": {"field": ["msg"]}}
- Coupon rejections (400): {"error": {...}, "reason": "MinimumNotMet"}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a compact error message suitable for Locust failure messages and log lines."""
    try:
        body = response.json()
    except ValueError:
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    detail = body.get("detail")
    if isinstance(detail, list):
        parts = []
        for err in detail:
            loc = ".".join(str(p) for p in err.get("loc", []))
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts)
    if isinstance(detail, str):
        return detail

    if "error" in body:
        error = body["error"]
        message = " | ".join(f"{k}: {v}" for k, v in error.items()) if isinstance(error, dict) else str(error)
        if body.get("reason"):
            message = f"[{body['reason']}] {message}"
        return message

    return str(body)[:300]
