from __future__ import annotations

import logging
import sys

# Chatty at INFO; raise explicitly via their own logger names when debugging.
_NOISY_LOGGERS = ("werkzeug", "sqlalchemy.engine", "urllib3")


def setup_logging(level: str = "INFO") -> None:
    """Route everything to stdout; thread names show which lines came from the email pool."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(threadName)s] %(name)s %(message)s"))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, root.level))
