"""Application-wide logging setup."""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Install a single stderr handler on the root logger.

    Safe to call more than once: the handler is only added the first time,
    later calls just adjust the level.
    """
    root = logging.getLogger()
    root.setLevel(level)

    if not any(getattr(h, "_ledger_handler", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._ledger_handler = True
        root.addHandler(handler)

    # SQL echo is controlled by the engine; keep its logger quiet otherwise
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
