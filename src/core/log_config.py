"""Logging setup. Modules only ever call logging.getLogger(__name__); the app configures handlers once."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # uvicorn/fastapi keep their own handlers; only align the level of our own loggers
    logging.getLogger("src").setLevel(level.upper())
