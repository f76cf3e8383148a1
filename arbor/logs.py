"""
Library logging setup.

Arbor modules log through logging.getLogger(__name__) under the "arbor"
namespace. configure() attaches one rich handler to that namespace, sized to
the run's verbosity; calling it again replaces the handler it installed
before instead of stacking a new one.
"""
import logging

from rich.logging import RichHandler

LEVELS = {"quiet": logging.ERROR, "normal": logging.WARNING, "verbose": logging.DEBUG}

logger = logging.getLogger("arbor")


def configure(verbosity="normal", console=None, /):
    """
    route arbor's log records to a RichHandler on console.

    records stop at the "arbor" logger (propagate is turned off), so a root
    handler configured by the host does not print them a second time.
    returns the installed handler.
    """
    for handler in list(logger.handlers):
        if getattr(handler, "_arbor", False):
            logger.removeHandler(handler)

    handler = RichHandler(console=console, show_path=False, rich_tracebacks=False)
    handler._arbor = True
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    logger.setLevel(LEVELS.get(verbosity, logging.WARNING))
    return handler


__all__ = ("LEVELS", "configure")
