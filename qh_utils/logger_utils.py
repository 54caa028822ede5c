import logging
import sys
from pythonjsonlogger import jsonlogger

SERVICE_LOGGER = "quizhub"

LOG_FORMAT = '%(asctime)s %(name)s %(levelname)s %(module)s %(funcName)s %(message)s'


def _json_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(jsonlogger.JsonFormatter(
        LOG_FORMAT,
        rename_fields={"asctime": "timestamp", "levelname": "level"},
    ))
    return handler


def get_logger(name: str = SERVICE_LOGGER, log_level: str = "INFO"):
    """A JSON logger writing to stdout. Records passed via `extra=` become top-level keys."""
    named = logging.getLogger(name)
    named.setLevel(log_level)
    named.propagate = False
    if not named.handlers:
        named.addHandler(_json_handler())
    return named


def configure_logging(log_level: str):
    """Apply the configured level to the service logger; the app factory calls this once per app."""
    return get_logger(SERVICE_LOGGER, log_level.upper())


# Default logger instance
logger = get_logger()
