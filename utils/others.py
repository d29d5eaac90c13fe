import logging
import os
from datetime import datetime

from definitions import LOGS_DIR

logger = logging.getLogger(__name__)

# Never echo these to the log, even at startup.
SECRET_FIELDS = {"bluesky_password", "openai_api_key"}


class ColoredFormatter(logging.Formatter):
    COLORS = {
        "DEBUG": "\033[38;5;244m",  # gray
        "INFO": "\033[38;5;120m",  # soft mint green
        "WARNING": "\033[38;5;221m",  # warm yellow
        "ERROR": "\033[38;5;196m",  # bright red
        "CRITICAL": "\033[1;38;5;196;48;5;232m",  # bold bright red on dark bg
    }
    RESET = "\033[0m"

    def format(self, record):
        level = record.levelname
        if level in self.COLORS:
            record.levelname = f"{self.COLORS[level]}{level}{self.RESET}"
        return super().format(record)


def setup_logging(settings, console=False, debug=False, quiet=False):
    """
    Sets up the logging configuration based on provided settings.

    Args:
        settings (Settings): Resolved settings; `log_file_name` names the log file.
        console (bool): If True, log to console instead of a file.
        debug (bool): If True, set the logging level to DEBUG; otherwise, INFO.
        quiet (bool): If True, only CRITICAL messages are emitted. Wins over `debug`.
    """
    # Define logger level
    if quiet:
        logger_level = logging.CRITICAL
    else:
        logger_level = logging.DEBUG if debug else logging.INFO

    # Define logging format
    log_format = "%(asctime)s [%(name)s.%(funcName)s:%(lineno)d] %(levelname)s - %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    if console:
        handler = logging.StreamHandler()
        handler.setFormatter(ColoredFormatter(log_format, datefmt=date_format))
        log_file_path = None
    else:
        log_file_name_time = datetime.now().strftime("%Y%m%d%H%M%S")
        log_file_path = os.path.join(LOGS_DIR, f"{settings.log_file_name}-{log_file_name_time}.log")
        os.makedirs(LOGS_DIR, exist_ok=True)
        handler = logging.FileHandler(log_file_path, encoding="utf-8")
        handler.setFormatter(logging.Formatter(log_format, date_format))

    logging.basicConfig(
        level=logger_level,
        format=log_format,
        datefmt=date_format,
        handlers=[handler],
        force=True,
    )

    # The HTTP stack is chatty at DEBUG
    for noisy in ("httpx", "httpcore", "openai"):
        logging.getLogger(noisy).setLevel(max(logger_level, logging.INFO))

    logger.info("Logging initialized.")
    if log_file_path is None:
        logger.info("Logging to console.")
    else:
        logger.info(f"Logging to file: {log_file_path}")


def log_startup_info(args, settings):
    """
    Log startup information, including arguments and (non-secret) settings.

    Args:
        args (Namespace): The parsed arguments.
        settings (Settings): The resolved settings.
    """
    logger.info("#" * 80)
    logger.info("New instance of the side-tracker bot started.")
    logger.info("TIME: %s", datetime.now())
    logger.info("Startup Parameters:")

    for arg, value in vars(args).items():
        logger.info(f"  ARG - {arg}: {value}")

    logger.info("Settings:")
    for name, value in vars(settings).items():
        if name in SECRET_FIELDS:
            value = "***" if value else None
        logger.info(f"  SETTING - {name}: {value}")

    logger.info("#" * 80)
