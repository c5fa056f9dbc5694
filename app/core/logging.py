"""Logging setup."""

import logging

from app.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger once for the API process."""
    logging.basicConfig(level=(level or settings.log_level).upper(), format=LOG_FORMAT)
