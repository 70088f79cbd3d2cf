from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

LOG_LEVEL = os.getenv("PLANPAL_LOG_LEVEL", "INFO").upper()
LOG_DIR = Path(os.getenv("PLANPAL_LOG_DIR", Path.cwd() / "logs"))

_CONFIGURED = False


def configure_logging(*, level: Optional[str] = None, log_dir: Optional[Path] = None, to_file: bool = True) -> None:
    """Configure application-wide logging: console plus one file per UTC day."""

    global _CONFIGURED
    if _CONFIGURED:
        return

    resolved_level = getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if to_file:
        directory = log_dir or LOG_DIR
        directory.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d")
        handlers.append(logging.FileHandler(directory / f"planpal-{timestamp}.log", encoding="utf-8"))

    logging.basicConfig(
        level=resolved_level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        handlers=handlers,
    )
    # the HTTP client logs every request at INFO
    logging.getLogger("httpx").setLevel(max(resolved_level, logging.WARNING))
    _CONFIGURED = True
