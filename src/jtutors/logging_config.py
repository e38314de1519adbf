from __future__ import annotations

import logging

from jtutors.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once per process.

    Outside development the SQLAlchemy engine and uvicorn access loggers are
    held at WARNING so request logs stay readable.
    """
    global _configured
    if _configured:
        return

    settings = get_settings()
    resolved = (level or settings.log_level).upper()
    logging.basicConfig(level=getattr(logging, resolved, logging.INFO), format=LOG_FORMAT)
    if settings.app_env != "development":
        for name in ("sqlalchemy.engine", "uvicorn.access"):
            logging.getLogger(name).setLevel(logging.WARNING)
    _configured = True
