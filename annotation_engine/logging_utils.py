"""
Logging helpers

Modules log through ``logging.getLogger(__name__)`` and never attach handlers
on import. Applications embedding the engine call ``setup_logging`` once.
"""
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

LOGGER_NAME = "annotation_engine"


def setup_logging(
    level: int = logging.INFO,
    log_dir: Optional[Path] = None,
    name: str = LOGGER_NAME,
) -> logging.Logger:
    """
    Set up logging for the annotation engine.

    Creates a console handler and, when ``log_dir`` is given, a file handler.

    Args:
        level: Logging level
        log_dir: Directory for log files (no file logging if None)
        name: Logger name

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Clear existing handlers
    logger.handlers = []

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(message)s"))
    logger.addHandler(console_handler)

    # File handler
    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"{name}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(file_handler)

    return logger
