"""Log helpers shared by core and adapters."""

import logging

ROOT_LOGGER = "mcmonitor"


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``mcmonitor`` namespace.

    Args:
        name: Usually ``__name__`` of the calling module.

    Returns:
        Standard library logger.
    """
    if name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def log_exception(message: str, **attributes: str | int | float | bool) -> None:
    """Log ``message`` at ERROR with the active exception's traceback.

    Must be called from inside an ``except`` block.

    Args:
        message: The log message
        **attributes: Additional structured fields
    """
    get_logger(ROOT_LOGGER).exception(message, extra=attributes)
