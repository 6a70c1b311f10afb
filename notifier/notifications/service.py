"""Change-to-notification dispatch for booking, notification and user events."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from starlette.concurrency import run_in_threadpool

from notifier.notifications.booking_templates import DEFAULT_GENERIC_MESSAGE, DEFAULT_GENERIC_TITLE, PushContent, render_reschedule_content, render_status_content
from notifier.notifications.contracts import CLICK_ACTION, NotificationProviderError, PushNotification, PushSender, RecipientLookupError, UserDirectory
from notifier.schema.records import BookingRecord, NotificationRecord, UserRecord
from notifier.utils.redaction import redact_token

logger = logging.getLogger(__name__)


class DispatchResult(str, Enum):
  SENT = "sent"
  SKIPPED = "skipped"
  FAILED = "failed"
  OBSERVED = "observed"


@dataclass(frozen=True)
class DispatchSettings:
  """Formatting and filtering options shared by the handlers."""

  locale: str = "en_US"
  timezone: str = "UTC"
  generic_notification_types: frozenset[str] = frozenset({"general"})
  log_unsupported_types: bool = False


class NotificationDispatcher:
  """Turns observed record transitions into at most one push each.

  Handlers are independent and keep no state between calls. Delivery is not
  idempotent: the same transition observed twice is delivered twice.
  """

  def __init__(self, *, user_directory: UserDirectory, push_sender: PushSender, settings: DispatchSettings | None = None) -> None:
    self._user_directory = user_directory
    self._push_sender = push_sender
    self._settings = settings or DispatchSettings()

  async def handle_booking_updated(self, before: BookingRecord | None, after: BookingRecord | None, booking_id: str) -> DispatchResult:
    """Notify the booking owner about a status change or a reschedule."""
    if before is None or after is None:
      logger.warning("Booking %s: Missing data", booking_id)
      return DispatchResult.SKIPPED

    status_changed = before.status != after.status
    schedule_changed = before.scheduled_at is not None and after.scheduled_at is not None and before.scheduled_at != after.scheduled_at

    if not status_changed and not schedule_changed:
      logger.info("Booking %s: Status and schedule unchanged, skipping notification", booking_id)
      return DispatchResult.SKIPPED

    if status_changed:
      logger.info("Booking %s: Status changed from %s to %s", booking_id, before.status, after.status)
    if schedule_changed:
      logger.info("Booking %s: Schedule changed from %s to %s", booking_id, before.scheduled_at.isoformat(), after.scheduled_at.isoformat())

    if not after.user_email:
      logger.warning("Booking %s: No user email found, skipping notification", booking_id)
      return DispatchResult.SKIPPED

    try:
      token = await self._resolve_token(after.user_email)
      if token is None:
        return DispatchResult.SKIPPED

      if status_changed:
        content = render_status_content(after.status)
        if content is None:
          logger.info("Booking %s: Status '%s' does not trigger notification", booking_id, after.status)
          return DispatchResult.SKIPPED
        scheduled_millis = ""
      else:
        content = render_reschedule_content(after.scheduled_at, locale=self._settings.locale, timezone=self._settings.timezone)
        scheduled_millis = str(int(after.scheduled_at.timestamp() * 1000)) if after.scheduled_at is not None else ""

      data = {"bookingId": booking_id, "status": after.status or "", "type": content.notification_type, "click_action": CLICK_ACTION, "scheduledDateTime": scheduled_millis}
      return await self._deliver(token=token, content=content, data=data, recipient=after.user_email)

    except NotificationProviderError as exc:
      logger.error("Error sending notification for booking %s (provider error): %s", booking_id, exc)
    except RecipientLookupError as exc:
      logger.error("Error resolving recipient for booking %s: %s", booking_id, exc)
    except Exception as exc:  # noqa: BLE001
      logger.error("Error sending notification for booking %s: %s", booking_id, exc, exc_info=True)

    return DispatchResult.FAILED

  async def handle_notification_created(self, record: NotificationRecord | None, notification_id: str) -> DispatchResult:
    """Push a newly created application notification to its recipient."""
    if record is None:
      logger.warning("Notification %s: Missing data", notification_id)
      return DispatchResult.SKIPPED

    if record.type not in self._settings.generic_notification_types:
      # Booking-specific types are pushed by the booking handler.
      if self._settings.log_unsupported_types:
        logger.info("Notification %s: Type '%s' is not pushed on creation", notification_id, record.type)
      return DispatchResult.SKIPPED

    if not record.recipient_email:
      logger.warning("Notification %s: No recipient email found, skipping notification", notification_id)
      return DispatchResult.SKIPPED

    try:
      token = await self._resolve_token(record.recipient_email)
      if token is None:
        return DispatchResult.SKIPPED

      content = PushContent(title=record.title or DEFAULT_GENERIC_TITLE, body=record.message or DEFAULT_GENERIC_MESSAGE, notification_type=record.type or "")
      data = {"type": content.notification_type, "click_action": CLICK_ACTION, "notificationId": notification_id}
      return await self._deliver(token=token, content=content, data=data, recipient=record.recipient_email)

    except NotificationProviderError as exc:
      logger.error("Error sending notification %s (provider error): %s", notification_id, exc)
    except RecipientLookupError as exc:
      logger.error("Error resolving recipient for notification %s: %s", notification_id, exc)
    except Exception as exc:  # noqa: BLE001
      logger.error("Error sending notification %s: %s", notification_id, exc, exc_info=True)

    return DispatchResult.FAILED

  async def handle_user_deleted(self, user: UserRecord | None, user_id: str) -> DispatchResult:
    """Record that a deleted user's token is now orphaned; FCM expires it on its own."""
    if user is not None and user.delivery_token:
      logger.info("User %s deleted, FCM token was: %s", user_id, redact_token(user.delivery_token))
    return DispatchResult.OBSERVED

  async def handle_user_token_changed(self, before: UserRecord | None, after: UserRecord | None, user_id: str) -> DispatchResult:
    """Log delivery token rotation for a user."""
    before_token = before.delivery_token if before is not None else None
    after_token = after.delivery_token if after is not None else None

    if before_token != after_token:
      logger.info("User %s FCM token updated", user_id)
      logger.info("Old token: %s", redact_token(before_token))
      logger.info("New token: %s", redact_token(after_token))
    return DispatchResult.OBSERVED

  async def _resolve_token(self, email: str) -> str | None:
    user = await run_in_threadpool(self._user_directory.find_by_email, email)
    if user is None:
      logger.warning("No user document found for email: %s", email)
      return None

    if not user.delivery_token:
      logger.warning("No FCM token found for user: %s", email)
      return None

    return user.delivery_token

  async def _deliver(self, *, token: str, content: PushContent, data: dict[str, str], recipient: str) -> DispatchResult:
    notification = PushNotification(token=token, title=content.title, body=content.body, data=data)
    response = await run_in_threadpool(self._push_sender.send, notification)
    logger.info("Successfully sent notification to %s: %s", recipient, response)
    return DispatchResult.SENT
