"""Lightweight .env loader for local runs and the Firestore emulator."""

from __future__ import annotations

import os
from pathlib import Path


def default_env_path() -> Path:
  """Return the .env path, honouring NOTIFIER_ENV_FILE when it is set."""
  explicit = (os.getenv("NOTIFIER_ENV_FILE") or "").strip()
  if explicit:
    return Path(explicit)

  return Path(__file__).resolve().parents[2] / ".env"


def parse_env_line(raw_line: str) -> tuple[str, str] | None:
  """Split one `KEY=value` line, returning None for blanks and comments."""
  line = raw_line.strip()
  if not line or line.startswith("#"):
    return None

  if line.startswith("export "):
    line = line[len("export ") :].lstrip()

  key, sep, value = line.partition("=")
  key = key.strip()
  if not sep or not key:
    return None

  value = value.strip()
  if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
    value = value[1:-1]

  return key, value


def load_env_file(path: Path, *, override: bool = False) -> list[str]:
  """Load key=value pairs from a .env file and return the keys that were applied."""
  if not path.is_file():
    return []

  applied: list[str] = []
  for raw_line in path.read_text(encoding="utf-8").splitlines():
    parsed = parse_env_line(raw_line)
    if parsed is None:
      continue

    key, value = parsed
    # Real environment wins unless the caller asks otherwise.
    if not override and key in os.environ:
      continue

    os.environ[key] = value
    applied.append(key)

  return applied
