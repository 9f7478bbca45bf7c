"""Run the FitSync API under Uvicorn (the `fitsync-server` script)."""

from __future__ import annotations

import logging
import os

import uvicorn

from . import config

logger = logging.getLogger("fitsync.server")

DEFAULT_PORT = 3001


def main() -> None:
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", str(DEFAULT_PORT)))
    workers = int(os.getenv("UVICORN_WORKERS", "2"))

    logging.basicConfig(level=config.LOG_LEVEL.upper())

    logger.info("Starting FitSync API on %s:%s (%s workers, env=%s)", host, port, workers, config.ENVIRONMENT)
    uvicorn.run(
        "fitsync.main:app",
        host=host,
        port=port,
        workers=workers,
        proxy_headers=True,
        log_level=config.LOG_LEVEL,
    )


if __name__ == "__main__":
    main()
