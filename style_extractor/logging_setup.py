"""Console and per-run file logging for the extraction service."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

LOG_DIR = Path(os.getenv("APP_LOG_DIR", "logs"))
LOG_FILENAME = os.getenv("APP_LOG_FILENAME", "style-extractor.log")
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
NOISY_LOGGERS = ("urllib3", "charset_normalizer")


def parse_level(level: Optional[str | int], default: int = logging.INFO) -> int:
    """Accept ``"debug"``, ``"10"`` or ``10``; anything else yields ``default``."""

    if isinstance(level, int):
        return level
    name = (level or "").strip().upper()
    if name.isdigit():
        return int(name)
    mapped = logging.getLevelName(name) if name else None
    return mapped if isinstance(mapped, int) else default


def _build_handlers(log_path: Path) -> List[logging.Handler]:
    formatter = logging.Formatter(LOG_FORMAT)
    handlers: List[logging.Handler] = [
        logging.StreamHandler(),
        logging.FileHandler(log_path, mode="w", encoding="utf-8"),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure_logging(level: Optional[str | int] = None, log_dir: Path | None = None) -> Path:
    """Route the root logger to stderr and to a log file rewritten on each start.

    Connection pool loggers never go below ``WARNING`` so per-sheet fetch logs
    stay readable at ``DEBUG``. Returns the log file path.
    """

    log_level = parse_level(level)
    log_path = (log_dir or LOG_DIR) / LOG_FILENAME
    log_path.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in _build_handlers(log_path):
        root.addHandler(handler)
    root.setLevel(log_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
    logging.getLogger(__name__).info(
        "Logging to %s at %s", log_path, logging.getLevelName(log_level)
    )
    return log_path
