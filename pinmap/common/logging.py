# pinmap/common/logging.py
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).strip().upper(), logging.INFO)


def get_logger(name: str = "pinmap", level: int | str | None = None) -> logging.Logger:
    """
    Return a named logger.
    If nothing configured logging yet, we add a basicConfig once.
    """
    logger = logging.getLogger(name)
    if not logging.getLogger().handlers and not logger.handlers:
        logging.basicConfig(level=_level(level or logging.INFO), format=LOG_FORMAT)
    if level is not None:
        logger.setLevel(_level(level))
    return logger


def configure_logging(level: int | str = "INFO", log_file: Optional[Path] = None) -> None:
    """
    CLI logging setup:

    - Reset any existing handlers on the root logger.
    - Attach a StreamHandler to stderr (stdout stays clean for tables/results).
    - Optionally attach a FileHandler.
    """
    lvl = _level(level)
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    root.setLevel(lvl)

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(lvl)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(path, encoding="utf-8")
        fh.setLevel(lvl)
        fh.setFormatter(formatter)
        root.addHandler(fh)

    # chatty HTTP internals
    logging.getLogger("urllib3").setLevel(max(lvl, logging.WARNING))
