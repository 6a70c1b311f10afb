import logging

import firebase_admin
from firebase_admin import credentials, firestore
from google.cloud.firestore import Client as FirestoreClient

from notifier.config import Settings

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME = "booking-notifier"


def build_firebase_app(settings: Settings) -> firebase_admin.App:
  """Create (or reuse) the named Firebase app used by the notifier."""
  # Reuse the app across lifespan restarts in the same process.
  try:
    return firebase_admin.get_app(FIREBASE_APP_NAME)
  except ValueError:
    pass

  options = {"projectId": settings.firebase_project_id} if settings.firebase_project_id else None
  if settings.firebase_service_account_json_path:
    cred = credentials.Certificate(settings.firebase_service_account_json_path)
  else:
    # Use default credentials (e.g. Google Application Default Credentials)
    cred = credentials.ApplicationDefault()

  if not settings.firebase_project_id:
    logger.warning("Firebase Project ID not set; relying on credentials to resolve the project.")

  app = firebase_admin.initialize_app(cred, options, name=FIREBASE_APP_NAME)
  logger.info("Firebase Admin SDK initialized app=%s project=%s", app.name, app.project_id)
  return app


def get_firestore_client(app: firebase_admin.App) -> FirestoreClient:
  """Return the Firestore client bound to the given Firebase app."""
  return firestore.client(app=app)


def close_firebase_app(app: firebase_admin.App | None) -> None:
  """Delete the Firebase app so its clients release transports."""
  if app is None:
    return

  try:
    firebase_admin.delete_app(app)
  except ValueError as exc:
    logger.warning("Firebase app already deleted: %s", exc)
