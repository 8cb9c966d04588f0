import logging
import sys

from app.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the API process."""
    log_level = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        format=LOG_FORMAT,
        stream=sys.stdout,
        level=getattr(logging, log_level, logging.INFO),
    )
    # motor/pymongo are chatty at DEBUG
    logging.getLogger("pymongo").setLevel(logging.WARNING)
