import logging
import sys
from typing import Union

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s:%(funcName)s:%(lineno)d - %(message)s"

# chatty per-request loggers from the HTTP stack
_QUIET_LOGGERS = ("uvicorn.access", "aiohttp.access")


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    """Send every screener log line to stdout; replaces any handlers already installed."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
