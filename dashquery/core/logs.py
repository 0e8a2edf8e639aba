import sys
import io
import logging
from typing import List

from dashquery.config import Settings, get_settings

LOGGER_NAME = "dashquery"

logging_str = (
    "[ %(asctime)s ] [%(name)s] | Module: %(module)s |"
    "Function: %(funcName)s | Line: %(lineno)d - %(levelname)s - %(message)s"
)


def _utf8_stdout():
    stream = sys.stdout
    try:
        if getattr(stream, "encoding", "").lower() != "utf-8":
            return io.TextIOWrapper(stream.buffer, encoding="utf-8", errors="replace")
    except (AttributeError, RuntimeError, ValueError):
        pass
    return stream


def build_handlers(settings: Settings) -> List[logging.Handler]:
    """Handlers for the service log: the configured log file plus stdout."""
    return [
        logging.FileHandler(f"{settings.log_file}", mode="a", encoding="utf-8"),
        logging.StreamHandler(_utf8_stdout()),
    ]


settings = get_settings()

logging.basicConfig(
    format=logging_str,
    level=settings.log_level,
    handlers=build_handlers(settings),
)

logger = logging.getLogger(LOGGER_NAME)
