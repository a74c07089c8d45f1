"""Encode/decode Python values to/from Firestore REST typed values.

Firestore REST documents carry every field as a one-key typed object
({"stringValue": ...}, {"integerValue": "5"}, ...). Integer values arrive
as strings and are turned back into int, which matters for task
dependencies: legacy template ids are numeric.
"""

import base64
from datetime import UTC, datetime
from typing import Any


def encode_value(v: Any) -> dict:
    """Return the Firestore typed value for a Python value."""
    if v is None:
        return {"nullValue": None}
    if isinstance(v, bool):
        return {"booleanValue": v}
    if isinstance(v, int):
        return {"integerValue": str(v)}
    if isinstance(v, float):
        return {"doubleValue": v}
    if isinstance(v, datetime):
        aware = v if v.tzinfo else v.replace(tzinfo=UTC)
        return {"timestampValue": aware.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S.%fZ")}
    if isinstance(v, str):
        return {"stringValue": v}
    if isinstance(v, bytes):
        return {"bytesValue": base64.standard_b64encode(v).decode("ascii")}
    if isinstance(v, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(x) for x in v]}}
    if isinstance(v, dict):
        return {"mapValue": {"fields": {k: encode_value(x) for k, x in v.items()}}}
    raise TypeError(f"Unsupported Firestore value type: {type(v)}")


def encode_fields(data: dict[str, Any]) -> dict[str, dict]:
    """Convert a Python dict to a Firestore `fields` map."""
    return {k: encode_value(v) for k, v in data.items()}


def _parse_timestamp(raw: str) -> datetime:
    # Firestore sends up to nanosecond precision; fromisoformat takes microseconds.
    head, _, frac = raw.rstrip("Z").partition(".")
    if frac:
        head = f"{head}.{frac[:6].ljust(6, '0')}"
    return datetime.fromisoformat(head).replace(tzinfo=UTC)


def decode_value(obj: dict) -> Any:
    """Return the Python value for a Firestore typed value."""
    if "nullValue" in obj:
        return None
    if "booleanValue" in obj:
        return obj["booleanValue"]
    if "integerValue" in obj:
        return int(obj["integerValue"])
    if "doubleValue" in obj:
        return float(obj["doubleValue"])
    if "timestampValue" in obj:
        return _parse_timestamp(obj["timestampValue"])
    if "stringValue" in obj:
        return obj["stringValue"]
    if "bytesValue" in obj:
        return base64.standard_b64decode(obj["bytesValue"])
    if "referenceValue" in obj:
        return obj["referenceValue"]
    if "arrayValue" in obj:
        return [decode_value(x) for x in obj["arrayValue"].get("values") or []]
    if "mapValue" in obj:
        return {k: decode_value(x) for k, x in (obj["mapValue"].get("fields") or {}).items()}
    return None


def decode_fields(document: dict | None) -> dict[str, Any]:
    """Convert a REST Document (with its `fields` map) to a Python dict."""
    if not document:
        return {}
    return {k: decode_value(v) for k, v in (document.get("fields") or {}).items()}
