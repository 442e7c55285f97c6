"""Logging setup for the warden CLI."""

from __future__ import annotations

import logging

# Third-party loggers that log every request at INFO.
_CHATTY_LOGGERS = ("httpx", "httpcore")


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger with a terse CLI format.

    Request-level logs from the HTTP stack are only shown at DEBUG. Pass
    ``force=True`` to reconfigure an already configured root logger.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    quiet = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(quiet)
