"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from babel import Locale, UnknownLocaleError
from babel.dates import get_timezone

from notifier.utils.env import default_env_path, load_env_file

load_env_file(default_env_path(), override=False)

DEFAULT_LOCALE = "en_US"
DEFAULT_TIMEZONE = "UTC"
_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


@dataclass(frozen=True)
class Settings:
  """Typed settings for the booking notifier service."""

  environment: str
  debug: bool
  log_level: str
  log_dir: str | None
  log_max_bytes: int
  log_backup_count: int
  locale: str
  timezone: str
  push_enabled: bool
  push_max_attempts: int
  push_backoff_seconds: float
  android_channel_id: str
  users_collection: str
  generic_notification_types: frozenset[str]
  log_unsupported_types: bool
  firebase_project_id: str | None
  firebase_service_account_json_path: str | None


def _parse_bool(raw: str | None, *, default: bool = False) -> bool:
  """Parse a boolean-ish string from environment variables."""

  if raw is None or raw.strip() == "":
    return default

  normalized = raw.strip().lower()
  return normalized in {"1", "true", "yes", "on"}


def _optional_str(raw: str | None) -> str | None:
  if raw is None:
    return None
  value = raw.strip()
  if value == "":
    return None
  return value


def _parse_csv(raw: str | None, default: tuple[str, ...]) -> frozenset[str]:
  if not raw:
    return frozenset(default)

  items = [item.strip() for item in raw.split(",") if item.strip()]
  if not items:
    raise ValueError("NOTIFIER_GENERIC_NOTIFICATION_TYPES must include at least one type.")

  return frozenset(items)


def _parse_locale(raw: str | None) -> str:
  """Normalize a locale identifier to Babel's underscore form and verify it exists."""
  value = (_optional_str(raw) or DEFAULT_LOCALE).replace("-", "_")
  try:
    Locale.parse(value)
  except (UnknownLocaleError, ValueError) as exc:
    raise ValueError(f"NOTIFIER_LOCALE is not a known locale: {value}") from exc

  return value


def _parse_timezone(raw: str | None) -> str:
  value = _optional_str(raw) or DEFAULT_TIMEZONE
  try:
    get_timezone(value)
  except LookupError as exc:
    raise ValueError(f"NOTIFIER_TIMEZONE is not a known time zone: {value}") from exc

  return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Load settings once per process."""

  environment = os.getenv("NOTIFIER_ENV", "development").strip().lower()
  debug = _parse_bool(os.getenv("NOTIFIER_DEBUG"))

  log_level = (os.getenv("NOTIFIER_LOG_LEVEL") or ("DEBUG" if debug else "INFO")).strip().upper()
  if log_level not in _LOG_LEVELS:
    raise ValueError(f"NOTIFIER_LOG_LEVEL must be one of: {', '.join(sorted(_LOG_LEVELS))}.")

  log_max_bytes = int(os.getenv("NOTIFIER_LOG_MAX_BYTES", "5242880"))  # 5MB default
  if log_max_bytes <= 0:
    raise ValueError("NOTIFIER_LOG_MAX_BYTES must be a positive integer.")

  log_backup_count = int(os.getenv("NOTIFIER_LOG_BACKUP_COUNT", "10"))
  if log_backup_count < 0:
    raise ValueError("NOTIFIER_LOG_BACKUP_COUNT must be zero or a positive integer.")

  # Delivery is attempted once unless operators opt into bounded retries.
  push_max_attempts = int(os.getenv("NOTIFIER_PUSH_MAX_ATTEMPTS", "1"))
  if push_max_attempts <= 0:
    raise ValueError("NOTIFIER_PUSH_MAX_ATTEMPTS must be a positive integer.")

  push_backoff_seconds = float(os.getenv("NOTIFIER_PUSH_BACKOFF_SECONDS", "0.5"))
  if push_backoff_seconds < 0:
    raise ValueError("NOTIFIER_PUSH_BACKOFF_SECONDS must be zero or positive.")

  android_channel_id = _optional_str(os.getenv("NOTIFIER_ANDROID_CHANNEL_ID")) or "booking_channel"
  users_collection = _optional_str(os.getenv("NOTIFIER_USERS_COLLECTION")) or "Users"

  return Settings(
    environment=environment,
    debug=debug,
    log_level=log_level,
    log_dir=_optional_str(os.getenv("NOTIFIER_LOG_DIR")),
    log_max_bytes=log_max_bytes,
    log_backup_count=log_backup_count,
    locale=_parse_locale(os.getenv("NOTIFIER_LOCALE")),
    timezone=_parse_timezone(os.getenv("NOTIFIER_TIMEZONE")),
    push_enabled=_parse_bool(os.getenv("NOTIFIER_PUSH_ENABLED"), default=True),
    push_max_attempts=push_max_attempts,
    push_backoff_seconds=push_backoff_seconds,
    android_channel_id=android_channel_id,
    users_collection=users_collection,
    generic_notification_types=_parse_csv(os.getenv("NOTIFIER_GENERIC_NOTIFICATION_TYPES"), ("general",)),
    log_unsupported_types=_parse_bool(os.getenv("NOTIFIER_LOG_UNSUPPORTED_TYPES")),
    firebase_project_id=_optional_str(os.getenv("FIREBASE_PROJECT_ID")),
    firebase_service_account_json_path=_optional_str(os.getenv("FIREBASE_SERVICE_ACCOUNT_JSON_PATH")),
  )
