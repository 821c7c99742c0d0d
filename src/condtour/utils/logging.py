"""Package logger for condtour.

Modules obtain children of the ``condtour`` logger through :func:`get_logger`
(``condtour.tour``, ``condtour.viz`` and so on).  The package logger carries a
``NullHandler`` so that importing condtour prints nothing;
:func:`configure_logging` attaches a console handler for scripts and examples.
"""

import logging


logger = logging.getLogger("condtour")
logger.addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return a child of the ``condtour`` logger, e.g. ``condtour.tour``."""
    if name == "condtour" or name.startswith("condtour."):
        return logging.getLogger(name)
    return logger.getChild(name)


def configure_logging(enabled: bool = True, level: int = logging.INFO) -> None:
    """Route condtour's records to stderr, or mute them.

    Parameters
    ----------
    enabled:
        Attach a console handler printing ``[LEVEL] message`` lines.  With
        ``False`` the package logger is raised above ``CRITICAL``, which also
        silences the per-move ``[tour]`` DEBUG records.
    level:
        Threshold for the console handler.  Session summaries (``[api]``,
        ``[path]``, snapshot paths) are INFO; cursor moves and bandwidth
        changes are DEBUG.

    Handlers previously attached to the ``condtour`` logger are replaced, so
    calling this repeatedly never duplicates output.
    """
    logger.handlers.clear()

    if enabled:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        logger.addHandler(handler)
        logger.setLevel(level)
    else:
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.CRITICAL + 1)


__all__ = ["logger", "get_logger", "configure_logging"]
