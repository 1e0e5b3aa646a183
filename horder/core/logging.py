from __future__ import annotations

import logging
import sys

from horder.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def configure_logging(level: str | None = None) -> None:
    global _configured
    if _configured:
        return

    settings = get_settings()
    resolved = (level or settings.log_level).upper()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger("horder")
    root.setLevel(resolved)
    root.addHandler(handler)

    # uvicorn/sqlalchemy keep their own handlers; only align verbosity.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    _configured = True
