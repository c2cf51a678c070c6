import logging
import sys
from pathlib import Path
from typing import Optional, Union

LOGGER_NAME = "cellsep"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None
) -> logging.Logger:
    """Setup function for the package logger"""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    # Avoid adding duplicate handlers if setup is called multiple times
    if not any(getattr(h, '_cellsep_console', False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)
        handler._cellsep_console = True
        logger.addHandler(handler)

    for handler in logger.handlers:
        handler.setLevel(level)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_file))
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        logger.addHandler(file_handler)

    return logger


# Create a global logger instance
logger = logging.getLogger(LOGGER_NAME)
