from __future__ import annotations

import json
import logging
import os
import time
from typing import Any, Dict, Optional

PACKAGE_LOGGER = "net_toolkit"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def create_logger(level: str = "WARNING", log_file: Optional[str] = None) -> logging.Logger:
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level.upper())

    # Prevent duplicate handlers if called again (tests, repeated CLI runs)
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT)

    sh = logging.StreamHandler()
    sh.setFormatter(formatter)
    logger.addHandler(sh)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        fh = logging.FileHandler(log_file)
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    return logger


def now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def log_event(logger: logging.Logger, event: str, fields: Dict[str, Any],
              level: int = logging.INFO) -> None:
    """Emit a single-line JSON record for a scan lifecycle event."""
    if not logger.isEnabledFor(level):
        return
    payload = {"ts": now_iso(), "event": event, **fields}
    logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))
