import json
import logging

from app.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)8s | %(name)s | %(message)s"


class JSONFormatter(logging.Formatter):
    def format(self, record):
        payload = {
            "timestamp": record.created,
            "level": record.levelname,
            "name": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def get_logger(name: str) -> logging.Logger:
    """
    Returns a configured logger with the given name.
    Handlers are only attached once per logger.
    """
    logger = logging.getLogger(name.lower().replace(" ", "-"))

    if not logger.handlers:
        handler = logging.StreamHandler()
        if settings.LOG_JSON:
            handler.setFormatter(JSONFormatter())
        else:
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(settings.LOG_LEVEL.upper())
        logger.propagate = False

    return logger
