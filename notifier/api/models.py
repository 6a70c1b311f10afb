from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from notifier.schema.firestore_values import decode_fields, document_id

EVENT_CREATED = "google.cloud.firestore.document.v1.created"
EVENT_UPDATED = "google.cloud.firestore.document.v1.updated"
EVENT_DELETED = "google.cloud.firestore.document.v1.deleted"


class FirestoreDocument(BaseModel):
  """A document snapshot in Firestore REST encoding, with `fields` decoded on load."""

  name: str | None = None
  data: dict[str, Any] = Field(default_factory=dict, alias="fields")
  create_time: str | None = Field(default=None, alias="createTime")
  update_time: str | None = Field(default=None, alias="updateTime")
  model_config = ConfigDict(populate_by_name=True, extra="ignore")

  @field_validator("data", mode="before")
  @classmethod
  def decode_typed_fields(cls, value: Any) -> dict[str, Any]:
    if value is None:
      return {}
    if not isinstance(value, dict):
      raise ValueError("fields must be an object of typed values.")
    return decode_fields(value)

  @property
  def document_id(self) -> str | None:
    return document_id(self.name)


class DocumentMask(BaseModel):
  field_paths: list[str] = Field(default_factory=list, alias="fieldPaths")
  model_config = ConfigDict(populate_by_name=True)


class DocumentEventData(BaseModel):
  """JSON form of `google.events.cloud.firestore.v1.DocumentEventData`."""

  value: FirestoreDocument | None = None
  old_value: FirestoreDocument | None = Field(default=None, alias="oldValue")
  update_mask: DocumentMask | None = Field(default=None, alias="updateMask")
  model_config = ConfigDict(populate_by_name=True, extra="ignore")

  def resolve_document_id(self, subject: str | None = None) -> str:
    """Return the affected document id from the snapshots or the CloudEvent subject."""
    for document in (self.value, self.old_value):
      if document is not None and document.document_id:
        return document.document_id

    resolved = document_id(subject)
    return resolved or "unknown"


class EventAck(BaseModel):
  status: str
