import logging
import logging.handlers

from rich.console import Console
from rich.logging import RichHandler

from .config import Settings
from .utils.redaction import SecretRedactionFilter


def setup_logging(settings: Settings) -> None:
    log_dir = settings.log_directory
    log_dir.mkdir(parents=True, exist_ok=True)

    redaction_filter = SecretRedactionFilter()

    # Rich console handler
    console = Console(width=120)
    rich_handler = RichHandler(
        console=console,
        show_time=True,
        show_level=True,
        show_path=True,
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=False,
    )
    rich_handler.setLevel(settings.log_level)
    rich_handler.addFilter(redaction_filter)

    file_format = (
        "%(asctime)s - %(levelname)s - "
        "%(filename)s:%(lineno)d in %(funcName)s() - "
        "%(message)s"
    )

    file_handler = logging.handlers.TimedRotatingFileHandler(
        filename=settings.log_file_path,
        when="midnight",
        interval=1,
        backupCount=settings.log_retention_days,
        encoding="utf-8",
    )
    file_handler.setLevel(settings.log_level)
    file_handler.setFormatter(logging.Formatter(file_format))
    file_handler.addFilter(redaction_filter)

    # Configure root logger (catches everything)
    root_logger = logging.getLogger()
    root_logger.setLevel(settings.log_level)

    # Clear any existing handlers to avoid duplicates
    root_logger.handlers.clear()

    root_logger.addHandler(rich_handler)
    root_logger.addHandler(file_handler)

    # asyncio logs every killed subprocess at DEBUG
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logging.info(
        f"Logging initialized - File: {settings.log_file_path}, "
        f"Level: {settings.log_level}, "
        f"Retention: {settings.log_retention_days} days"
    )
