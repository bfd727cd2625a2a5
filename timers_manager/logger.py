import gzip
import logging
import logging.handlers
import os
import shutil
import sys
from gzip import GzipFile
from pathlib import Path

from .config import Settings

logger = logging.getLogger("timers_manager")
logger.addHandler(logging.NullHandler())
formatter = logging.Formatter(
    "%(asctime)s %(levelname)s [%(module)s:%(funcName)s:%(lineno)d] %(message)s"
)


def rotator(source, dest):
    with open(source, "rb") as f_in:
        with gzip.open(dest + ".gz", "wb") as f_out:
            assert isinstance(f_out, GzipFile)
            shutil.copyfileobj(f_in, f_out)
    os.remove(source)


def configure_logging(settings: Settings) -> logging.Logger:
    """
    Attach stdout and (optionally) rotating file handlers to the package logger.

    Library users who configure logging themselves never need to call this;
    the CLI calls it once at startup. Calling it again replaces the handlers
    installed by the previous call.
    """
    for handler in list(logger.handlers):
        if getattr(handler, "_timers_manager", False):
            logger.removeHandler(handler)
            handler.close()

    logger.setLevel(settings.log_level.upper())

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    stream_handler._timers_manager = True  # type: ignore[attr-defined]
    logger.addHandler(stream_handler)

    if settings.logs_dir is not None:
        logs_dir = Path(settings.logs_dir)
        logs_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.TimedRotatingFileHandler(
            logs_dir / "timers.log", when="midnight"
        )
        file_handler.setFormatter(formatter)
        file_handler.rotator = rotator
        file_handler._timers_manager = True  # type: ignore[attr-defined]
        logger.addHandler(file_handler)

    return logger
