"""
Logging setup: Rich console output plus a plain-text log file.
"""

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOG_FILE_NAME = "tagbatch.log"


def setup_logging(
    console: Console, verbosity: int = 0, log_dir: Path | None = None
) -> logging.Logger:
    """
    Configures the 'tagbatch' logger.

    Args:
        console: Console the RichHandler writes to.
        verbosity: 0 = INFO, 2+ = DEBUG.
        log_dir: Directory for the log file (None = no file).
    """
    logger = logging.getLogger("tagbatch")
    logger.handlers.clear()
    logger.setLevel("DEBUG" if verbosity >= 2 else "INFO")
    logger.propagate = False

    logger.addHandler(
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=verbosity >= 1,
            markup=True,
        )
    )

    if log_dir is not None:
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_dir / LOG_FILE_NAME, encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not open log file in '{log_dir}': {e}")
        else:
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
            )
            logger.addHandler(file_handler)
    return logger
