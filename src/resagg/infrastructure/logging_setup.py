"""Logging configuration for CLI runs."""

import logging

from rich.console import Console
from rich.logging import RichHandler

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def configure_logging(level: str = "WARNING") -> None:
    """Route ``resagg`` loggers through a rich handler on stderr."""
    normalized = level.strip().upper()
    if normalized not in _LEVELS:
        raise ValueError(
            f"invalid log level {level!r}; expected one of {', '.join(_LEVELS)}"
        )

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    root = logging.getLogger("resagg")
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(normalized)
    root.propagate = False
