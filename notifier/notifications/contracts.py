"""Contracts for recipient lookup and push delivery."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from notifier.schema.records import UserRecord

CLICK_ACTION = "FLUTTER_NOTIFICATION_CLICK"


@dataclass(frozen=True)
class PushNotification:
  """Represents a push message addressed to a single device token."""

  token: str
  title: str
  body: str
  data: dict[str, str] = field(default_factory=dict)


class NotificationError(Exception):
  """Base class for all notification delivery failures."""


class RecipientLookupError(NotificationError):
  """Exception raised when the user store cannot be queried."""


class NotificationProviderError(NotificationError):
  """Exception raised when the push provider returns a delivery error."""


class InvalidDeliveryTokenError(NotificationProviderError):
  """Exception raised when a delivery token is unregistered or malformed."""


class TransientPushProviderError(NotificationProviderError):
  """Exception raised when transient push provider failures exhaust retries."""


class UserDirectory(Protocol):
  """Lookup contract for resolving a recipient by email."""

  def find_by_email(self, email: str) -> UserRecord | None:
    """Return the first user whose email matches exactly, or None."""


class PushSender(Protocol):
  """Delivery contract for sending push notifications."""

  def send(self, notification: PushNotification) -> str | None:
    """Send a push notification synchronously and return the provider message id."""
