"""Firestore lookups for notification recipients."""

from __future__ import annotations

import logging

from google.api_core import exceptions as google_exceptions
from google.cloud.firestore import Client as FirestoreClient
from google.cloud.firestore import FieldFilter

from notifier.notifications.contracts import RecipientLookupError, UserDirectory
from notifier.schema.records import UserRecord

logger = logging.getLogger(__name__)


class FirestoreUserRepository(UserDirectory):
  """Resolve users by email from the Firestore users collection."""

  def __init__(self, *, client: FirestoreClient, collection: str = "Users") -> None:
    self._client = client
    self._collection = collection

  def find_by_email(self, email: str) -> UserRecord | None:
    """Return the first user document whose `email` equals the given value."""
    # Email uniqueness is not enforced by the store; the first match wins.
    query = self._client.collection(self._collection).where(filter=FieldFilter("email", "==", email)).limit(1)
    try:
      snapshots = list(query.stream())
    except google_exceptions.GoogleAPIError as exc:
      raise RecipientLookupError(f"User lookup failed collection={self._collection}: {exc}") from exc

    if not snapshots:
      return None

    snapshot = snapshots[0]
    logger.debug("Resolved user document id=%s for email=%s", snapshot.id, email)
    return UserRecord.from_fields(snapshot.to_dict() or {})
