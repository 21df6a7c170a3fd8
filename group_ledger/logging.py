from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int = "INFO", *, sql_echo: bool = False) -> None:
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)

    # SQLAlchemy echoes every statement at INFO; keep it out of the way unless asked for.
    noisy = logging.INFO if sql_echo else logging.WARNING
    logging.getLogger("sqlalchemy.engine").setLevel(noisy)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
