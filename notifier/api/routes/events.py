"""Eventarc endpoints for Firestore document changes."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request, status

from notifier.api.models import EVENT_CREATED, EVENT_DELETED, EVENT_UPDATED, DocumentEventData, EventAck, FirestoreDocument
from notifier.notifications.service import NotificationDispatcher
from notifier.schema.records import BookingRecord, NotificationRecord, UserRecord

router = APIRouter()
logger = logging.getLogger(__name__)


def get_dispatcher(request: Request) -> NotificationDispatcher:
  """Return the dispatcher built during application startup."""
  return request.app.state.dispatcher


DispatcherDep = Annotated[NotificationDispatcher, Depends(get_dispatcher)]


def _booking(document: FirestoreDocument | None) -> BookingRecord | None:
  return BookingRecord.from_fields(document.data) if document is not None else None


def _user(document: FirestoreDocument | None) -> UserRecord | None:
  return UserRecord.from_fields(document.data) if document is not None else None


@router.post("/bookings", status_code=status.HTTP_200_OK)
async def booking_updated(event: DocumentEventData, dispatcher: DispatcherDep, ce_subject: str | None = Header(default=None)) -> EventAck:
  """Handle an update to a booking document."""
  booking_id = event.resolve_document_id(ce_subject)
  result = await dispatcher.handle_booking_updated(_booking(event.old_value), _booking(event.value), booking_id)
  return EventAck(status=result.value)


@router.post("/notifications", status_code=status.HTTP_200_OK)
async def notification_created(event: DocumentEventData, dispatcher: DispatcherDep, ce_type: str | None = Header(default=None), ce_subject: str | None = Header(default=None)) -> EventAck:
  """Handle creation of a notification document."""
  notification_id = event.resolve_document_id(ce_subject)
  # Only creations push; updates and deletes of the same document are ignored.
  is_creation = ce_type == EVENT_CREATED if ce_type else event.old_value is None
  if not is_creation or event.value is None:
    logger.debug("Notification %s: ignoring non-creation event type=%s", notification_id, ce_type)
    return EventAck(status="ignored")

  record = NotificationRecord.from_fields(event.value.data)
  result = await dispatcher.handle_notification_created(record, notification_id)
  return EventAck(status=result.value)


@router.post("/users", status_code=status.HTTP_200_OK)
async def user_changed(event: DocumentEventData, dispatcher: DispatcherDep, ce_type: str | None = Header(default=None), ce_subject: str | None = Header(default=None)) -> EventAck:
  """Route user deletions and updates to their observers."""
  user_id = event.resolve_document_id(ce_subject)
  if ce_type is None:
    # Infer the change kind from which snapshots are present.
    if event.old_value is not None and event.value is None:
      ce_type = EVENT_DELETED
    elif event.old_value is not None and event.value is not None:
      ce_type = EVENT_UPDATED

  if ce_type == EVENT_DELETED:
    result = await dispatcher.handle_user_deleted(_user(event.old_value), user_id)
  elif ce_type == EVENT_UPDATED:
    result = await dispatcher.handle_user_token_changed(_user(event.old_value), _user(event.value), user_id)
  else:
    logger.debug("User %s: ignoring event type=%s", user_id, ce_type)
    return EventAck(status="ignored")

  return EventAck(status=result.value)
