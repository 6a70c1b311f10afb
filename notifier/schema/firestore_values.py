"""Decode Firestore REST typed values into plain Python values.

Eventarc delivers Firestore document events as `DocumentEventData`. When the
trigger is created with `application/json` content type, each document is the
REST representation: `{"name": ..., "fields": {"status": {"stringValue": "approved"}}}`.
"""

from __future__ import annotations

import base64
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from pydantic import TypeAdapter, ValidationError


_TIMESTAMP_ADAPTER = TypeAdapter(datetime)


class FirestoreValueError(ValueError):
  """Raised when a typed value cannot be decoded."""


def parse_timestamp(raw: str) -> datetime:
  """Parse an RFC 3339 timestamp; nanoseconds are truncated to microseconds."""
  try:
    parsed = _TIMESTAMP_ADAPTER.validate_python(raw.strip())
  except ValidationError as exc:
    raise FirestoreValueError(f"Invalid timestampValue: {raw!r}") from exc

  if parsed.tzinfo is None:
    parsed = parsed.replace(tzinfo=timezone.utc)
  return parsed


def _object(kind: str, raw: Any) -> Mapping[str, Any]:
  """Return the object body of a structured value, rejecting other JSON shapes."""
  if raw is None:
    return {}
  if not isinstance(raw, Mapping):
    raise FirestoreValueError(f"{kind} must be an object, got {type(raw).__name__}")
  return raw


def decode_value(value: Mapping[str, Any]) -> Any:
  """Decode a single typed value."""
  if not isinstance(value, Mapping) or len(value) != 1:
    raise FirestoreValueError(f"Expected a single-key typed value, got {value!r}")

  kind, raw = next(iter(value.items()))
  try:
    return _decode_kind(kind, raw)
  except TypeError as exc:
    # Scalar kinds given an object or list, e.g. {"integerValue": {}}.
    raise FirestoreValueError(f"Malformed {kind}: {exc}") from exc


def _decode_kind(kind: str, raw: Any) -> Any:
  if kind == "nullValue":
    return None
  if kind in {"stringValue", "referenceValue"}:
    return str(raw)
  if kind == "booleanValue":
    return bool(raw)
  if kind == "integerValue":
    # int64 values are JSON strings.
    return int(raw)
  if kind == "doubleValue":
    return float(raw)
  if kind == "timestampValue":
    return parse_timestamp(str(raw))
  if kind == "bytesValue":
    return base64.b64decode(raw)
  if kind == "geoPointValue":
    point = _object(kind, raw)
    return {"latitude": float(point.get("latitude", 0.0)), "longitude": float(point.get("longitude", 0.0))}
  if kind == "arrayValue":
    values = _object(kind, raw).get("values", [])
    if not isinstance(values, list):
      raise FirestoreValueError("arrayValue.values must be a list.")
    return [decode_value(item) for item in values]
  if kind == "mapValue":
    fields = _object(kind, raw).get("fields", {})
    if not isinstance(fields, Mapping):
      raise FirestoreValueError("mapValue.fields must be an object.")
    return decode_fields(fields)

  raise FirestoreValueError(f"Unsupported Firestore value kind: {kind}")


def decode_fields(fields: Mapping[str, Any] | None) -> dict[str, Any]:
  """Decode a document `fields` mapping."""
  if not fields:
    return {}
  return {key: decode_value(value) for key, value in fields.items()}


def document_id(name: str | None) -> str | None:
  """Return the last path segment of a document resource name."""
  if not name:
    return None
  return name.rstrip("/").rsplit("/", 1)[-1] or None
