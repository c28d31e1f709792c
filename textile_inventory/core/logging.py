import logging
import sys
from loguru import logger

from textile_inventory.core.config import settings


class InterceptHandler(logging.Handler):
    """Forwards stdlib log records (uvicorn, SQLAlchemy) to loguru."""

    def emit(self, record):
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk out of the logging module so loguru reports the real caller
        frame, depth = logging.currentframe(), 2
        while frame.f_back and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging():
    level = "DEBUG" if settings.debug else "INFO"

    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    logging.basicConfig(handlers=[InterceptHandler()], level=logging.INFO)

    # SQL echo only when debugging
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.debug else logging.WARNING)

    logger.remove()
    logger.add(sys.stderr, level=level)
    logger.add(
        settings.log_file,
        rotation="500 MB",
        retention="30 days",
        compression="zip",
        level=level,
        backtrace=True,
        diagnose=settings.debug,
    )
