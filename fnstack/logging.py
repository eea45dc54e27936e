"""Package-wide logging for stack builds.

Every fnstack module logs through a child of the ``fnstack`` logger, so one
call to ``set_global_log_level`` controls the verbosity of the loader, the
composers and the assembler together. Build steps log at DEBUG; the
assembler reports a one-line summary at INFO.
"""

import logging
import sys
from typing import Optional

_ROOT_LOGGER_NAME = "fnstack"
_DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def setup_root_logger(
    level: int = logging.INFO,
    format_string: Optional[str] = None,
    handler: Optional[logging.Handler] = None,
) -> None:
    """Install the single handler on the ``fnstack`` logger.

    Only the first call has an effect until ``reset_logging`` is called.

    Args:
        level: Initial level of the package logger.
        format_string: Record format; defaults to time, logger, level, message.
        handler: Destination; defaults to a stdout stream so build progress
            interleaves with CLI output.
    """
    global _configured

    if _configured:
        return

    package_logger = logging.getLogger(_ROOT_LOGGER_NAME)
    package_logger.setLevel(level)
    package_logger.handlers.clear()

    handler = handler or logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(format_string or _DEFAULT_FORMAT))
    package_logger.addHandler(handler)

    # Records still reach the root logger so pytest's caplog sees them
    package_logger.propagate = True

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return the logger for ``name``, usually a module's ``__name__``.

    The logger has no level or handlers of its own and follows the
    ``fnstack`` logger.
    """
    setup_root_logger()

    logger = logging.getLogger(name)
    logger.setLevel(logging.NOTSET)
    return logger


def set_global_log_level(level: int) -> None:
    """Set the level of the ``fnstack`` logger and its handlers.

    Args:
        level: A ``logging`` level such as ``logging.DEBUG``.
    """
    setup_root_logger()

    package_logger = logging.getLogger(_ROOT_LOGGER_NAME)
    package_logger.setLevel(level)
    for handler in package_logger.handlers:
        handler.setLevel(level)


def enable_debug_logging() -> None:
    """Show per-step build details (node creation, identity composition)."""
    set_global_log_level(logging.DEBUG)


def disable_debug_logging() -> None:
    set_global_log_level(logging.INFO)


def reset_logging() -> None:
    """Drop the handler and level so the next setup starts fresh. Used by tests."""
    global _configured
    _configured = False

    package_logger = logging.getLogger(_ROOT_LOGGER_NAME)
    package_logger.handlers.clear()
    package_logger.setLevel(logging.NOTSET)


setup_root_logger()
