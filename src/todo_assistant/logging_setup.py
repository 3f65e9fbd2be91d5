"""Process-wide logging configuration."""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(debug: bool = False, level: int = logging.INFO) -> None:
    """Configure the root logger once. ``debug`` wins over ``level``."""
    logging.basicConfig(
        level=logging.DEBUG if debug else level,
        format=LOG_FORMAT,
    )
