from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from google.api_core import exceptions as google_exceptions

from notifier.notifications.contracts import RecipientLookupError
from notifier.notifications.user_repo import FirestoreUserRepository


def _client_returning(snapshots):
  client = MagicMock()
  query = client.collection.return_value.where.return_value.limit.return_value
  query.stream.return_value = iter(snapshots)
  return client


def _snapshot(data: dict, doc_id: str = "u1"):
  snapshot = MagicMock()
  snapshot.id = doc_id
  snapshot.to_dict.return_value = data
  return snapshot


def test_find_by_email_queries_exact_match_limited_to_one():
  client = _client_returning([_snapshot({"email": "a@x.com", "fcmToken": "tok123"})])
  repo = FirestoreUserRepository(client=client, collection="Users")

  user = repo.find_by_email("a@x.com")

  assert user is not None
  assert user.delivery_token == "tok123"
  client.collection.assert_called_once_with("Users")
  field_filter = client.collection.return_value.where.call_args.kwargs["filter"]
  assert (field_filter.field_path, field_filter.op_string, field_filter.value) == ("email", "==", "a@x.com")
  client.collection.return_value.where.return_value.limit.assert_called_once_with(1)


def test_find_by_email_returns_none_on_miss():
  repo = FirestoreUserRepository(client=_client_returning([]))

  assert repo.find_by_email("nobody@x.com") is None


def test_find_by_email_wraps_store_errors():
  client = MagicMock()
  client.collection.return_value.where.return_value.limit.return_value.stream.side_effect = google_exceptions.ServiceUnavailable("down")
  repo = FirestoreUserRepository(client=client)

  with pytest.raises(RecipientLookupError):
    repo.find_by_email("a@x.com")
