"""Schema package exports."""

from .firestore_values import FirestoreValueError, decode_fields, decode_value, document_id, parse_timestamp
from .records import BookingRecord, BookingStatus, NotificationRecord, NotificationType, UserRecord

__all__ = ["BookingRecord", "BookingStatus", "NotificationRecord", "NotificationType", "UserRecord", "FirestoreValueError", "decode_fields", "decode_value", "document_id", "parse_timestamp"]
