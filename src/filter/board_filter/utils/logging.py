from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Iterable


def configure_logging(level: str | int = logging.INFO, handlers: Iterable[logging.Handler] | None = None) -> None:
    """Configure root logging for the proxy service and the batch scripts."""
    if isinstance(level, int):
        level = logging.getLevelName(level)

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s"}
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                }
            },
            "root": {"level": str(level).upper(), "handlers": ["console"]},
        }
    )

    if handlers:
        root = logging.getLogger()
        for handler in handlers:
            root.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
