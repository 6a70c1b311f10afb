"""Push notification delivery implementations."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import firebase_admin
from firebase_admin import exceptions as firebase_exceptions
from firebase_admin import messaging

from notifier.notifications.contracts import InvalidDeliveryTokenError, NotificationProviderError, PushNotification, PushSender, TransientPushProviderError
from notifier.utils.redaction import redact_token

logger = logging.getLogger(__name__)

_INVALID_TOKEN_ERRORS = (messaging.UnregisteredError, messaging.SenderIdMismatchError, firebase_exceptions.InvalidArgumentError)
_TRANSIENT_ERRORS = (firebase_exceptions.UnavailableError, firebase_exceptions.InternalError, firebase_exceptions.ResourceExhaustedError, firebase_exceptions.DeadlineExceededError)


@dataclass(frozen=True)
class FcmDeliveryConfig:
  """Platform hints and retry policy for FCM delivery."""

  android_channel_id: str = "booking_channel"
  max_attempts: int = 1
  backoff_seconds: float = 0.5


def build_message(notification: PushNotification, *, android_channel_id: str) -> messaging.Message:
  """Build an FCM message with Android and APNs delivery hints."""
  android = messaging.AndroidConfig(priority="high", notification=messaging.AndroidNotification(channel_id=android_channel_id, priority="high", sound="default"))
  apns = messaging.APNSConfig(payload=messaging.APNSPayload(aps=messaging.Aps(sound="default", badge=1)))
  return messaging.Message(
    notification=messaging.Notification(title=notification.title, body=notification.body), data=dict(notification.data), token=notification.token, android=android, apns=apns
  )


class FcmPushSender(PushSender):
  """`firebase_admin.messaging` backed sender with optional bounded retries."""

  def __init__(self, *, app: firebase_admin.App | None, config: FcmDeliveryConfig | None = None) -> None:
    self._app = app
    self._config = config or FcmDeliveryConfig()

  def send(self, notification: PushNotification) -> str | None:
    """Send a message, retrying transient provider failures up to the configured attempts."""
    message = build_message(notification, android_channel_id=self._config.android_channel_id)
    attempts = max(1, self._config.max_attempts)

    for attempt in range(attempts):
      try:
        return messaging.send(message, app=self._app)
      except _INVALID_TOKEN_ERRORS as exc:
        raise InvalidDeliveryTokenError(f"Delivery token rejected by FCM (code={exc.code})") from exc
      except _TRANSIENT_ERRORS as exc:
        if attempt + 1 < attempts:
          delay = self._config.backoff_seconds * (2**attempt)
          logger.warning("Transient FCM failure code=%s attempt=%d/%d; retrying in %.2fs", exc.code, attempt + 1, attempts, delay)
          time.sleep(delay)
          continue

        raise TransientPushProviderError(f"Transient FCM failure after {attempts} attempt(s) (code={exc.code})") from exc
      except firebase_exceptions.FirebaseError as exc:
        # Treat other provider responses as non-retriable delivery failures.
        raise NotificationProviderError(f"FCM delivery failed (code={exc.code})") from exc

    return None


class NullPushSender(PushSender):
  """No-op push sender used when push notifications are disabled."""

  def send(self, notification: PushNotification) -> str | None:
    """Drop the notification while recording a debug log."""
    logger.debug("Push notifications disabled; dropping push token=%s title=%s", redact_token(notification.token), notification.title)
    return None
