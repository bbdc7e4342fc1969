"""Logging setup for the signflow CLI."""

from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Configure the root logger for terminal output.

    A no-op when the root logger already has handlers, unless ``force`` is set.
    """

    logging.basicConfig(level=level, format=_FORMAT, datefmt="%H:%M:%S", force=force)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
