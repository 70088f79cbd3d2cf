"""Process start-up for the ``planpal`` CLI and the API server."""

from __future__ import annotations

from .logging import LOG_DIR, LOG_LEVEL, configure_logging

__all__ = ["LOG_DIR", "LOG_LEVEL", "configure_logging"]
