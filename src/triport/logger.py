"""
File-only logger — NEVER writes to stdout (would corrupt MCP frames and CLI output)
"""

import logging

from triport.config import Config


def get_logger(name: str) -> logging.Logger:
    """Get a logger that writes to file only."""
    Config.ensure_dirs()

    logger = logging.getLogger(f"triport.{name}")
    if logger.handlers:
        return logger

    level = logging.getLevelName(Config.LOG_LEVEL)
    logger.setLevel(level if isinstance(level, int) else logging.INFO)

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for path, handler_level in ((Config.LOG_FILE, logging.DEBUG), (Config.ERROR_LOG, logging.ERROR)):
        handler = logging.FileHandler(path, encoding="utf-8")
        handler.setLevel(handler_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.propagate = False
    return logger
