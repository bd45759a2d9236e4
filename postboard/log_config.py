from logging.config import dictConfig

from postboard.config import DevConfig, config

LOG_FILE = "postboard.log"


def app_log_level() -> str:
    return "DEBUG" if isinstance(config, DevConfig) else "INFO"


def configure_logging() -> None:
    """
    Console output through rich plus a rotating file. Every record carries the
    request correlation id, or ``-`` outside of a request.
    """
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {
                "correlation_id": {
                    "()": "asgi_correlation_id.CorrelationIdFilter",
                    "uuid_length": 8 if isinstance(config, DevConfig) else 32,
                    "default_value": "-",
                },
            },
            "formatters": {
                "console": {
                    "class": "logging.Formatter",
                    "datefmt": "%H:%M:%S",
                    "format": "(%(correlation_id)s) %(name)s:%(lineno)d - %(message)s",
                },
                "file": {
                    "class": "logging.Formatter",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                    "format": (
                        "%(asctime)s.%(msecs)03dZ | %(levelname)-8s | "
                        "[%(correlation_id)s] %(name)s:%(lineno)d - %(message)s"
                    ),
                },
            },
            "handlers": {
                "console": {
                    "class": "rich.logging.RichHandler",
                    "level": "DEBUG",
                    "formatter": "console",
                    "filters": ["correlation_id"],
                    "rich_tracebacks": True,
                },
                "file": {
                    "class": "logging.handlers.RotatingFileHandler",
                    "level": "INFO",
                    "formatter": "file",
                    "filters": ["correlation_id"],
                    "filename": LOG_FILE,
                    "maxBytes": 5 * 1024 * 1024,
                    "backupCount": 3,
                    "encoding": "utf8",
                },
            },
            "loggers": {
                "postboard": {
                    "handlers": ["console", "file"],
                    "level": app_log_level(),
                    "propagate": False,
                },
                "uvicorn.error": {"handlers": ["console"], "level": "INFO", "propagate": False},
                "sqlalchemy.engine": {"handlers": ["console"], "level": "WARNING"},
            },
        }
    )
