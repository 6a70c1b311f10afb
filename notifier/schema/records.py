"""Snapshots of the Firestore records the notifier reacts to."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from notifier.schema.firestore_values import FirestoreValueError, parse_timestamp


class BookingStatus(str, Enum):
  REQUESTED = "requested"
  APPROVED = "approved"
  IN_PROGRESS = "in-progress"
  COMPLETED = "completed"
  CANCELLED = "cancelled"


class NotificationType(str, Enum):
  GENERAL = "general"
  BOOKING_APPROVED = "booking_approved"
  BOOKING_IN_PROGRESS = "booking_in_progress"
  BOOKING_COMPLETED = "booking_completed"
  BOOKING_CANCELLED = "booking_cancelled"
  BOOKING_RESCHEDULED = "booking_rescheduled"


def _verbatim_text(value: Any) -> str | None:
  if value is None or value == "":
    return None
  return str(value)


def _coerce_instant(value: Any) -> datetime | None:
  """Accept Firestore timestamps, ISO strings and epoch milliseconds."""
  if value is None:
    return None
  if isinstance(value, datetime):
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
  if isinstance(value, bool):
    return None
  if isinstance(value, int | float):
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
  if isinstance(value, str) and value.strip():
    try:
      return parse_timestamp(value)
    except FirestoreValueError:
      return None
  return None


@dataclass(frozen=True)
class BookingRecord:
  """Booking fields read by the status/schedule notifier."""

  status: str | None
  scheduled_at: datetime | None
  user_email: str | None

  @classmethod
  def from_fields(cls, fields: Mapping[str, Any]) -> BookingRecord:
    # Unknown statuses are kept verbatim so the content table can reject them.
    return cls(status=_verbatim_text(fields.get("status")), scheduled_at=_coerce_instant(fields.get("scheduledDateTime")), user_email=_verbatim_text(fields.get("userEmail")))


@dataclass(frozen=True)
class UserRecord:
  """User fields needed to address a device."""

  email: str | None
  delivery_token: str | None

  @classmethod
  def from_fields(cls, fields: Mapping[str, Any]) -> UserRecord:
    return cls(email=_verbatim_text(fields.get("email")), delivery_token=_verbatim_text(fields.get("fcmToken")))


@dataclass(frozen=True)
class NotificationRecord:
  """An application-created notification document.

  `recipient_email` is stored under `userId` in Firestore; the field holds an
  email address rather than a user document id.
  """

  recipient_email: str | None
  type: str | None
  title: str | None
  message: str | None

  @classmethod
  def from_fields(cls, fields: Mapping[str, Any]) -> NotificationRecord:
    return cls(recipient_email=_verbatim_text(fields.get("userId")), type=_verbatim_text(fields.get("type")), title=_verbatim_text(fields.get("title")), message=_verbatim_text(fields.get("message")))
