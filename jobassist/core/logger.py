# jobassist/core/logger.py
import logging

from jobassist.core.config import settings

LOG_FORMAT = "[%(asctime)s] %(lineno)d %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str | None = None) -> None:
    logging.basicConfig(
        format=LOG_FORMAT,
        level=(level or settings.LOG_LEVEL).upper(),
    )
