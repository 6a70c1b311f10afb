from __future__ import annotations

from datetime import datetime, timezone

import pytest

from notifier.notifications.booking_templates import format_schedule, render_reschedule_content
from notifier.notifications.contracts import CLICK_ACTION, InvalidDeliveryTokenError, RecipientLookupError
from notifier.notifications.service import DispatchResult, DispatchSettings, NotificationDispatcher
from notifier.schema.records import BookingRecord, UserRecord

T1 = datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)
T2 = datetime(2024, 1, 2, 15, 0, tzinfo=timezone.utc)


def _booking(status: str | None = "requested", scheduled_at: datetime | None = T1, user_email: str | None = "a@x.com") -> BookingRecord:
  return BookingRecord(status=status, scheduled_at=scheduled_at, user_email=user_email)


def _sent(push_sender):
  assert push_sender.send.call_count == 1
  return push_sender.send.call_args[0][0]


@pytest.mark.anyio
async def test_approved_transition_sends_confirmation(dispatcher, user_directory, push_sender):
  result = await dispatcher.handle_booking_updated(_booking("requested"), _booking("approved"), "b1")

  assert result is DispatchResult.SENT
  user_directory.find_by_email.assert_called_once_with("a@x.com")
  notification = _sent(push_sender)
  assert notification.token == "tok123"
  assert notification.title == "Booking Confirmed!"
  assert notification.body == "Your booking has been approved. We look forward to serving you!"
  assert notification.data == {"bookingId": "b1", "status": "approved", "type": "booking_approved", "click_action": CLICK_ACTION, "scheduledDateTime": ""}


@pytest.mark.anyio
@pytest.mark.parametrize(
  ("status", "title", "notification_type"),
  [("in-progress", "Service Started", "booking_in_progress"), ("completed", "Service Completed", "booking_completed"), ("cancelled", "Booking Cancelled", "booking_cancelled")],
)
async def test_status_table_selects_matching_content(dispatcher, push_sender, status, title, notification_type):
  await dispatcher.handle_booking_updated(_booking("approved"), _booking(status), "b1")

  notification = _sent(push_sender)
  assert notification.title == title
  assert notification.data["type"] == notification_type
  assert notification.data["status"] == status


@pytest.mark.anyio
async def test_reschedule_sends_formatted_time(dispatcher, push_sender):
  result = await dispatcher.handle_booking_updated(_booking("approved", T1), _booking("approved", T2), "b2")

  assert result is DispatchResult.SENT
  notification = _sent(push_sender)
  assert notification.title == "Booking Rescheduled"
  assert "Jan 2, 2024" in notification.body
  assert notification.body.startswith("Your booking has been rescheduled to ")
  assert notification.data["type"] == "booking_rescheduled"
  assert notification.data["scheduledDateTime"] == str(int(T2.timestamp() * 1000))


@pytest.mark.anyio
async def test_reschedule_uses_configured_timezone(user_directory, push_sender):
  dispatcher = NotificationDispatcher(user_directory=user_directory, push_sender=push_sender, settings=DispatchSettings(locale="en_US", timezone="Asia/Tokyo"))
  late = datetime(2024, 1, 2, 20, 0, tzinfo=timezone.utc)

  await dispatcher.handle_booking_updated(_booking("approved", T1), _booking("approved", late), "b2")

  # 20:00 UTC is already the next day in Tokyo.
  assert "Jan 3, 2024" in _sent(push_sender).body



def test_reschedule_without_time_falls_back_to_generic_wording():
  assert format_schedule(None, locale="en_US", timezone="UTC") == "a new time"

  content = render_reschedule_content(None, locale="en_US", timezone="UTC")

  assert content.title == "Booking Rescheduled"
  assert content.body == "Your booking has been rescheduled to a new time."
  assert content.notification_type == "booking_rescheduled"


@pytest.mark.anyio
async def test_status_change_wins_over_reschedule(dispatcher, push_sender):
  await dispatcher.handle_booking_updated(_booking("requested", T1), _booking("cancelled", T2), "b1")

  notification = _sent(push_sender)
  assert notification.data["type"] == "booking_cancelled"
  assert notification.data["scheduledDateTime"] == ""


@pytest.mark.anyio
async def test_unknown_status_sends_nothing(dispatcher, push_sender):
  result = await dispatcher.handle_booking_updated(_booking("requested"), _booking("pending_review"), "b3")

  assert result is DispatchResult.SKIPPED
  push_sender.send.assert_not_called()


@pytest.mark.anyio
@pytest.mark.parametrize(("before_at", "after_at"), [(T1, T1), (None, T2), (T1, None), (None, None)])
async def test_unchanged_status_and_schedule_is_noop(dispatcher, user_directory, push_sender, before_at, after_at):
  result = await dispatcher.handle_booking_updated(_booking("approved", before_at), _booking("approved", after_at), "b1")

  assert result is DispatchResult.SKIPPED
  user_directory.find_by_email.assert_not_called()
  push_sender.send.assert_not_called()


@pytest.mark.anyio
async def test_missing_snapshot_is_noop(dispatcher, push_sender):
  assert await dispatcher.handle_booking_updated(None, _booking("approved"), "b1") is DispatchResult.SKIPPED
  assert await dispatcher.handle_booking_updated(_booking(), None, "b1") is DispatchResult.SKIPPED
  push_sender.send.assert_not_called()


@pytest.mark.anyio
async def test_missing_email_skips_lookup(dispatcher, user_directory, push_sender, caplog):
  result = await dispatcher.handle_booking_updated(_booking("requested", user_email=None), _booking("approved", user_email=None), "b1")

  assert result is DispatchResult.SKIPPED
  user_directory.find_by_email.assert_not_called()
  push_sender.send.assert_not_called()
  assert "No user email found" in caplog.text


@pytest.mark.anyio
@pytest.mark.parametrize("user", [None, UserRecord(email="a@x.com", delivery_token=None)])
async def test_lookup_miss_or_missing_token_sends_nothing(dispatcher, user_directory, push_sender, user):
  user_directory.find_by_email.return_value = user

  result = await dispatcher.handle_booking_updated(_booking("requested"), _booking("approved"), "b1")

  assert result is DispatchResult.SKIPPED
  push_sender.send.assert_not_called()


@pytest.mark.anyio
async def test_lookup_error_is_logged_not_raised(dispatcher, user_directory, push_sender, caplog):
  user_directory.find_by_email.side_effect = RecipientLookupError("firestore down")

  result = await dispatcher.handle_booking_updated(_booking("requested"), _booking("approved"), "b1")

  assert result is DispatchResult.FAILED
  push_sender.send.assert_not_called()
  assert "firestore down" in caplog.text


@pytest.mark.anyio
@pytest.mark.parametrize("error", [InvalidDeliveryTokenError("unregistered"), RuntimeError("socket closed")])
async def test_send_error_is_swallowed(dispatcher, push_sender, error):
  push_sender.send.side_effect = error

  result = await dispatcher.handle_booking_updated(_booking("requested"), _booking("approved"), "b1")

  assert result is DispatchResult.FAILED
  assert push_sender.send.call_count == 1


@pytest.mark.anyio
async def test_same_transition_twice_delivers_twice(dispatcher, push_sender):
  # Delivery is not idempotent under at-least-once event delivery.
  await dispatcher.handle_booking_updated(_booking("requested"), _booking("approved"), "b1")
  await dispatcher.handle_booking_updated(_booking("requested"), _booking("approved"), "b1")

  assert push_sender.send.call_count == 2


@pytest.mark.anyio
async def test_status_diff_compares_raw_values(dispatcher, push_sender):
  # A trailing space is a different stored value, so this is a transition.
  result = await dispatcher.handle_booking_updated(_booking("approved "), _booking("approved"), "b1")

  assert result is DispatchResult.SENT
  assert _sent(push_sender).title == "Booking Confirmed!"


@pytest.mark.anyio
@pytest.mark.parametrize("email", [" a@x.com ", "  "])
async def test_lookup_uses_stored_email_verbatim(dispatcher, user_directory, email):
  await dispatcher.handle_booking_updated(_booking("requested", user_email=email), _booking("approved", user_email=email), "b1")

  user_directory.find_by_email.assert_called_once_with(email)
