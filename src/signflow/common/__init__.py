from __future__ import annotations

from .clock import as_utc, utc_now
from .logging import configure_logging

__all__ = [
    "as_utc",
    "configure_logging",
    "utc_now",
]
