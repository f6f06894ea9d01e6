"""Shared logging helpers for repohost."""

from __future__ import annotations

import logging


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Set up root logging for the CLI.

    Only the first call takes effect unless ``force`` is set. Request lines from
    httpx are kept below ``level`` so branch and file operations stay readable.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
