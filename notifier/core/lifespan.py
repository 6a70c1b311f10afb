import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from notifier.config import get_settings
from notifier.core.firebase import build_firebase_app, close_firebase_app
from notifier.core.logging import initialize_logging
from notifier.notifications.factory import build_dispatcher


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
  """Configure logging and build the dispatcher before serving events."""
  settings = get_settings()
  logger = logging.getLogger("notifier.core.lifespan")

  initialize_logging(settings)
  logger.info("Starting notifier environment=%s locale=%s timezone=%s push_enabled=%s", settings.environment, settings.locale, settings.timezone, settings.push_enabled)

  # Fail fast: without Firebase no handler can do useful work.
  firebase_app = build_firebase_app(settings)
  app.state.firebase_app = firebase_app
  app.state.dispatcher = build_dispatcher(settings, firebase_app=firebase_app)
  logger.info("Startup complete - dispatcher ready.")

  try:
    yield
  finally:
    close_firebase_app(firebase_app)
    logger.info("Shutdown complete.")
