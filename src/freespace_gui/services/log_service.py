from __future__ import annotations

import logging

LOGGER_NAME = "freespace_gui"


def setup_logging(debug: bool = False) -> None:
    """Configure root logging and the package logger level."""
    level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logging.getLogger(LOGGER_NAME).setLevel(level)
