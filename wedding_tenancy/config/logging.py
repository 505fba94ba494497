import logging
import sys
from logging import StreamHandler

from wedding_tenancy.config.settings import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: int | None = None) -> None:
    """Log to stdout. SQL statements only show up when LOG_DB is set."""
    if level is None:
        level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[StreamHandler(sys.stdout)],
        force=True,
    )
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if settings.LOG_DB else logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
