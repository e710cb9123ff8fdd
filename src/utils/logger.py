import logging
import os

from rich.logging import RichHandler

from utils.config import Settings


class CenteredFormatter(logging.Formatter):
    longest_name_length = 14  # Initial default width

    def __init__(self, fmt=None, datefmt=None, style="%", initial_width=14):
        super().__init__(fmt, datefmt, style)
        CenteredFormatter.longest_name_length = initial_width

    def format(self, record):
        CenteredFormatter.longest_name_length = max(
            CenteredFormatter.longest_name_length, len(record.name)
        )

        dynamic_width = CenteredFormatter.longest_name_length + 2
        record.name = f"{record.name.center(dynamic_width - 2)}"
        return super().format(record)


def _build_handler(log_file: str | None) -> logging.Handler:
    if log_file:
        # the TUI owns the terminal, so file output must carry its own timestamp
        directory = os.path.dirname(log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(
            CenteredFormatter(
                "%(asctime)s %(levelname)-7s [%(name)s]  %(message)s",
                datefmt="%X",
            )
        )
        return handler

    handler = RichHandler(
        show_time=True,
        show_level=True,
        show_path=False,
        rich_tracebacks=True,
        log_time_format="[%X]",
    )
    handler.setFormatter(CenteredFormatter("[%(name)s]  %(message)s"))
    return handler


def get_logger(name=None) -> logging.Logger:
    """
    Creates and returns a logger for the given module name.

    Output goes through RichHandler, or to the file named by MARKET_LOG_FILE
    when the terminal is occupied by the app.
    """
    if name is None:
        name = "market"
    settings = Settings.from_env()
    logger = logging.getLogger(name)
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logger.setLevel(log_level)

    if not logger.handlers:
        handler = _build_handler(settings.log_file)
        handler.setLevel(log_level)
        logger.addHandler(handler)

        logger.propagate = False
        logger.debug(f"Logger for '{name}' initialized.")

    return logger
