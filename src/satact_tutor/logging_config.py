"""Console logging for the tutor package."""
import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "satact_tutor"


def setup_logging(level: str = "WARNING", console: Console | None = None) -> logging.Logger:
    """Attach a RichHandler to the package logger. Safe to call more than once."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        logger.addHandler(handler)
    logger.propagate = False
    return logger
