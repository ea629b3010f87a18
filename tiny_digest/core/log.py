"""
Logging helper for tiny-digest drivers.

Library modules only emit DEBUG records through ``logging.getLogger(__name__)``
and never configure handlers themselves. Scripts call ``get_logger`` once to
get readable console output.
"""

import logging

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def get_logger(name: str = "tiny_digest", level: int = logging.INFO) -> logging.Logger:
    """
    Return a logger with a single console handler attached.

    Calling this repeatedly for the same name does not stack handlers.

    Args:
        name: Logger name. The default covers every library module.
        level: Logging level to set on the logger.

    Returns:
        The configured logger.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger
