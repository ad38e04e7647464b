"""Process-wide logging setup (stdlib logging, plain text to stdout)."""

import logging
import sys

from config.settings import settings

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format=_FORMAT,
        stream=sys.stdout,
    )
    # SQL echo is controlled by DEBUG on the engine; keep the pool quiet otherwise
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
