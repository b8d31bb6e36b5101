"""
LinkFlow 3D - Logging Configuration
Sets up the console (and optional file) logger for the application
"""

import logging
import sys


LOGGER_NAMESPACE = "linkflow3d"


def setup_logging(level=logging.INFO, log_file=None):
    """
    Configure logging for the application.

    Modules log through logging.getLogger(__name__); since the modules are
    top-level, the handlers go on the root logger and the application logs
    under the 'linkflow3d' name.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to save logs to a file.
    """
    root = logging.getLogger()
    root.setLevel(level)

    # Avoid duplicate handlers when called again
    if root.hasHandlers():
        root.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    logger = logging.getLogger(LOGGER_NAMESPACE)
    logger.info("Logging initialized.")
    return logger
