"""Helpers for keeping delivery tokens out of logs."""

from __future__ import annotations

import hashlib


def redact_token(token: str | None) -> str:
  """Return a stable fingerprint for a delivery token so log lines can be correlated."""
  if not token:
    return "none"

  digest = hashlib.sha256(token.encode("utf-8")).hexdigest()
  return f"<len={len(token)} sha256={digest[:8]}>"
