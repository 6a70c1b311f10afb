"""Shared fixtures for notifier tests."""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
  sys.path.insert(0, str(ROOT))

from unittest.mock import MagicMock  # noqa: E402

import pytest  # noqa: E402

from notifier.config import get_settings  # noqa: E402
from notifier.notifications.service import DispatchSettings, NotificationDispatcher  # noqa: E402
from notifier.schema.records import UserRecord  # noqa: E402


@pytest.fixture
def anyio_backend():
  return "asyncio"


@pytest.fixture(autouse=True)
def _clear_settings_cache():
  get_settings.cache_clear()
  yield
  get_settings.cache_clear()


@pytest.fixture
def user_directory():
  directory = MagicMock()
  directory.find_by_email.return_value = UserRecord(email="a@x.com", delivery_token="tok123")
  return directory


@pytest.fixture
def push_sender():
  sender = MagicMock()
  sender.send.return_value = "projects/demo/messages/1"
  return sender


@pytest.fixture
def dispatcher(user_directory, push_sender):
  return NotificationDispatcher(user_directory=user_directory, push_sender=push_sender, settings=DispatchSettings(locale="en_US", timezone="UTC"))
