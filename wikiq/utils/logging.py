# =====================================================
#           INFRASTRUCTURE / LOGGING
# =====================================================

import logging
import os
from pathlib import Path
from datetime import datetime
from typing import Optional


def setup_logging(
    log_dir: Optional[str] = None,
    log_prefix: str = "wikiq",
    level: str = "INFO",
) -> logging.Logger:
    """
    Console logging on stderr, plus a DEBUG log file when `log_dir` is given.

    Standard output carries the TSV stream, so nothing is logged there.
    """
    pid = os.getpid()
    logger = logging.getLogger(f"wikiq-{pid}")

    # avoid duplicate handlers when called twice in one process
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level.upper())
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    log_file = None
    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        log_file = Path(log_dir) / f"{log_prefix}_{timestamp}_{pid}.log"

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized")
    if log_file:
        logger.info(f"Log file: {log_file}")

    return logger
