"""Response Envelope — the `{success, message, data, timestamp[, meta]}` shape every route returns."""

from datetime import datetime, timezone
from typing import Any


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def success(message: str = "Success", data: Any = None, meta: dict | None = None) -> dict:
    body = {"success": True, "message": message, "data": data, "timestamp": _now()}
    if meta:
        body["meta"] = meta
    return body


def error(message: str = "Error", data: Any = None) -> dict:
    return {"success": False, "message": message, "data": data, "timestamp": _now()}
