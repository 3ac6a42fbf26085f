import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def init_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure root logging for the putting coach.

    Engine modules only ask for loggers; the client (or a test run) decides
    where records go. Calling it again replaces the earlier handlers and level.
    """
    numeric_level = getattr(logging, (level or "INFO").upper(), logging.INFO)

    handlers = [logging.StreamHandler()]
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w")
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
        handlers.append(file_handler)

    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        handlers=handlers,
        force=True,
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-specific logger."""
    return logging.getLogger(name if name else "putting_coach")
