"""Process-wide logging setup shared by the API and the server entry point."""
import logging
import sys

import structlog

from core.settings import AppSettings


def configure_logging(app_settings: AppSettings) -> None:
    """Configure stdlib logging and structlog from application settings.

    stdlib loggers (``chat.*``, uvicorn, sqlalchemy) go to stdout through
    ``basicConfig``; structlog events are rendered as JSON or as console
    key/value pairs depending on ``JSON_LOGS`` and then handed to the stdlib
    logger of the same name.
    """
    level = logging.getLevelName(app_settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    renderer = (
        structlog.processors.JSONRenderer(ensure_ascii=False)
        if app_settings.JSON_LOGS
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
