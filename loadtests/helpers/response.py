"""Response error extraction for load test observability.

Handles the two error shapes the delivery API returns:

- Request validation (422): {"detail": [{"loc": [...], "msg": "..."}]}
- Domain errors (400/403/404/409): {"error": {"field": ["msg", ...]}}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Return a compact, human-readable error message for log lines."""
    try:
        body = response.json()
    except ValueError:
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if isinstance(body.get("detail"), list):
        parts = []
        for err in body["detail"]:
            loc = ".".join(str(p) for p in err.get("loc", []))
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts)

    if "error" in body:
        error = body["error"]
        if isinstance(error, dict):
            return " | ".join(
                f"{field}: {'; '.join(map(str, msgs)) if isinstance(msgs, list) else msgs}"
                for field, msgs in error.items()
            )
        return str(error)

    if "detail" in body:
        return str(body["detail"])
    return str(body)[:300]
