import datetime
import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .settings import Settings, settings as default_settings

APP_LOGGER_NAME = "supportbot"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
LOG_BACKUP_DAYS = 7

_LOGGING_CONFIGURED = False


class LocalTimezoneFormatter(logging.Formatter):
    """
    Renders %(asctime)s as ISO-8601 in LOG_TIMEZONE, or in the system zone
    when the name is unset or unknown.
    """

    def __init__(self, fmt: str = LOG_FORMAT, *, timezone_name: str | None = None) -> None:
        super().__init__(fmt)
        self._tzinfo: datetime.tzinfo | None = None
        if timezone_name:
            try:
                self._tzinfo = ZoneInfo(timezone_name)
            except (ZoneInfoNotFoundError, ValueError):
                pass

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        stamp = datetime.datetime.fromtimestamp(record.created, tz=self._tzinfo)
        if self._tzinfo is None:
            stamp = stamp.astimezone()
        return stamp.isoformat(timespec="milliseconds")


def build_file_handler(log_dir: Path, formatter: logging.Formatter) -> TimedRotatingFileHandler:
    """
    <log_dir>/supportbot.log, rotated at midnight, LOG_BACKUP_DAYS kept.
    Only records from the application logger are written.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        log_dir / f"{APP_LOGGER_NAME}.log",
        when="midnight",
        backupCount=LOG_BACKUP_DAYS,
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    handler.addFilter(lambda record: record.name.startswith(APP_LOGGER_NAME))
    return handler


def setup_logging(config: Settings | None = None) -> None:
    """
    Configure process logging once: application records to the daily file,
    everything (uvicorn included) to the console.
    """
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    cfg = config or default_settings
    level_value = getattr(logging, str(cfg.log_level).upper(), logging.INFO)
    formatter = LocalTimezoneFormatter(timezone_name=cfg.log_timezone)

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.setLevel(level_value)
    app_logger.addHandler(build_file_handler(Path(cfg.log_dir), formatter))

    root_logger = logging.getLogger()
    root_logger.setLevel(level_value)
    if not any(type(h) is logging.StreamHandler for h in root_logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    _LOGGING_CONFIGURED = True


logger = logging.getLogger(APP_LOGGER_NAME)
