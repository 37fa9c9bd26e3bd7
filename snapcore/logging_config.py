"""
snapcore/logging_config.py
--------------------------
Sets up the package loggers for the Snap suite.
Library modules only create loggers; scripts call setup_logging() once.
"""
import logging
import sys


def setup_logging(level=logging.INFO, log_file=None, namespace="snapflow"):
    """
    Configures the logger for a suite namespace.

    Args:
        level (int): Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file (str, optional): Path to also write the log to.
        namespace (str): Logger namespace to configure.

    Returns:
        logging.Logger: The configured namespace logger.
    """
    logger = logging.getLogger(namespace)
    logger.setLevel(level)

    # Avoid duplicate handlers when a script calls this twice
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    # 1. Console Handler (stdout)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # 2. File Handler (Optional)
    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized.")
    return logger
