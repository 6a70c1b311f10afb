import logging
import os

import uvicorn

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("entrypoint")


def main() -> None:
  # Cloud Run injects PORT; default to 8080 for local runs.
  port = int(os.getenv("PORT", "8080"))
  logger.info("Starting notifier on port %d...", port)
  uvicorn.run("notifier.main:app", host="0.0.0.0", port=port, log_config=None)


if __name__ == "__main__":
  main()
