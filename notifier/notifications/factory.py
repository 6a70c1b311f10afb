"""Factory helpers for the notification dispatcher."""

from __future__ import annotations

import firebase_admin

from notifier.config import Settings
from notifier.core.firebase import get_firestore_client
from notifier.notifications.contracts import PushSender
from notifier.notifications.push_sender import FcmDeliveryConfig, FcmPushSender, NullPushSender
from notifier.notifications.service import DispatchSettings, NotificationDispatcher
from notifier.notifications.user_repo import FirestoreUserRepository


def build_dispatch_settings(settings: Settings) -> DispatchSettings:
  return DispatchSettings(locale=settings.locale, timezone=settings.timezone, generic_notification_types=settings.generic_notification_types, log_unsupported_types=settings.log_unsupported_types)


def build_dispatcher(settings: Settings, *, firebase_app: firebase_admin.App) -> NotificationDispatcher:
  """Construct a dispatcher wired to Firestore and FCM for the given Firebase app."""
  user_repo = FirestoreUserRepository(client=get_firestore_client(firebase_app), collection=settings.users_collection)

  # Local runs against the emulator usually disable delivery.
  if settings.push_enabled:
    push_sender: PushSender = FcmPushSender(
      app=firebase_app, config=FcmDeliveryConfig(android_channel_id=settings.android_channel_id, max_attempts=settings.push_max_attempts, backoff_seconds=settings.push_backoff_seconds)
    )
  else:
    push_sender = NullPushSender()

  return NotificationDispatcher(user_directory=user_repo, push_sender=push_sender, settings=build_dispatch_settings(settings))
