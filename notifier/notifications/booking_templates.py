"""Push content for booking status and schedule changes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from babel.dates import format_datetime, get_timezone

from notifier.schema.records import BookingStatus, NotificationType

RESCHEDULE_FALLBACK_TIME = "a new time"
DEFAULT_GENERIC_TITLE = "New Notification"
DEFAULT_GENERIC_MESSAGE = "You have a new notification."


@dataclass(frozen=True)
class PushContent:
  """Title, body and type tag for a single push."""

  title: str
  body: str
  notification_type: str


STATUS_TEMPLATES: dict[str, PushContent] = {
  BookingStatus.APPROVED.value: PushContent(title="Booking Confirmed!", body="Your booking has been approved. We look forward to serving you!", notification_type=NotificationType.BOOKING_APPROVED.value),
  BookingStatus.IN_PROGRESS.value: PushContent(title="Service Started", body="Your vehicle service is now in progress.", notification_type=NotificationType.BOOKING_IN_PROGRESS.value),
  BookingStatus.COMPLETED.value: PushContent(title="Service Completed", body="Your vehicle service has been completed. Thank you for choosing EC Carwash!", notification_type=NotificationType.BOOKING_COMPLETED.value),
  BookingStatus.CANCELLED.value: PushContent(title="Booking Cancelled", body="Your booking has been cancelled.", notification_type=NotificationType.BOOKING_CANCELLED.value),
}


def render_status_content(status: str | None) -> PushContent | None:
  """Return the fixed content for a status, or None when the status does not notify."""
  if status is None:
    return None
  return STATUS_TEMPLATES.get(status)


def format_schedule(when: datetime | None, *, locale: str, timezone: str) -> str:
  """Render an instant for humans in the configured locale and time zone."""
  if when is None:
    return RESCHEDULE_FALLBACK_TIME
  return format_datetime(when, format="medium", tzinfo=get_timezone(timezone), locale=locale)


def render_reschedule_content(when: datetime | None, *, locale: str, timezone: str) -> PushContent:
  formatted = format_schedule(when, locale=locale, timezone=timezone)
  return PushContent(title="Booking Rescheduled", body=f"Your booking has been rescheduled to {formatted}.", notification_type=NotificationType.BOOKING_RESCHEDULED.value)
