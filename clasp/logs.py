"""
Clasp diagnostics logger.

The library logs parse entry and command routing at DEBUG level through a
single package logger and never installs handlers on import. Applications that
want to see those records on the console call setup_logging().
"""
import logging

from rich.logging import RichHandler

logger = logging.getLogger("clasp")


def setup_logging(level=logging.WARNING, /):
    """
    Attach a rich console handler to the clasp logger.

    Parameters
    - level: logging level for both the logger and its console handler.

    Behavior
    - Replaces any RichHandler previously attached by this function, so calling
      it twice does not duplicate records.
    - Leaves propagation untouched; records still reach the root logger.

    Returns
    - The configured handler.
    """
    for handler in [handler for handler in logger.handlers if isinstance(handler, RichHandler)]:
        logger.removeHandler(handler)

    handler = RichHandler(
        rich_tracebacks=True,
        show_time=True,
        show_level=True,
        show_path=False,
        markup=False,
        log_time_format="[%Y-%m-%d %H:%M:%S]",
    )
    handler.setLevel(level)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.debug("Logging initialized at level %s.", logging.getLevelName(level))
    return handler


__all__ = (
    "logger",
    "setup_logging",
)
