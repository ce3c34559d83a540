"""Logging setup."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

LOG_FORMAT = "%(message)s"


def setup_logging(level: str = "WARNING", verbose: bool = False) -> None:
    """Configure root logging with a Rich handler.

    Args:
        level: Logging level name (e.g., "INFO")
        verbose: Show timestamps, paths and full tracebacks
    """
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    handler = RichHandler(
        show_time=verbose,
        show_path=verbose,
        rich_tracebacks=verbose,
        markup=False,
    )

    logging.basicConfig(level=numeric_level, format=LOG_FORMAT, handlers=[handler], force=True)

    # Azure SDK HTTP logging is very noisy below WARNING
    if not verbose:
        logging.getLogger("azure").setLevel(logging.WARNING)
