# logging_config.py
import logging
from config import get_config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that flood INFO with per-request lines.
NOISY_LOGGERS = ("urllib3", "werkzeug", "PIL")


def configure_logging(debug: bool) -> None:
    """
    Configures the root logger once for the entire application.

    Library loggers are kept at WARNING unless debug mode is on.
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if debug else logging.WARNING)


DEBUG_MODE = get_config()["DEBUG_MODE"]
configure_logging(DEBUG_MODE)


def get_logger(name: str) -> logging.Logger:
    """
    Returns a logger with the given name.
    """
    return logging.getLogger(name)
