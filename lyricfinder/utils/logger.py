"""
Logging setup for Lyric-Finder

Two audiences read the logs:
- the person at the terminal, who should only see what the CLI decides to
  tell them (records marked with console_output, and warnings or worse)
- whoever debugs a failed lookup later, who wants every provider call in
  the rotating log file

--verbose lets every record through to the console as well.
"""

import functools
import logging
import logging.handlers
import re
import sys
import time
from pathlib import Path
from typing import Iterable, Optional
import colorama
from colorama import Fore, Back, Style

from ..config.settings import get_settings


colorama.init()

# HTTP and API client libraries log every request at INFO/DEBUG
QUIET_LOGGERS = (
    'spotipy', 'lyricsgenius', 'bs4',
    'requests', 'urllib3', 'urllib3.connectionpool',
)

FILE_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s.%(funcName)s | %(message)s'
FILE_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

SIZE_UNITS = {'KB': 1024, 'MB': 1024 ** 2, 'GB': 1024 ** 3, 'B': 1}


class ConsoleMessageFilter(logging.Filter):
    """Let only user-facing records reach the console"""

    def __init__(self, verbose: bool = False):
        super().__init__()
        self.verbose = verbose

    def filter(self, record: logging.LogRecord) -> bool:
        if self.verbose or record.levelno >= logging.WARNING:
            return True
        return bool(getattr(record, 'console_output', False))


class ConsoleFormatter(logging.Formatter):
    """Console formatter that colors warnings and errors"""

    LEVEL_COLORS = {
        logging.DEBUG: Fore.CYAN,
        logging.INFO: Fore.GREEN,
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Fore.RED + Back.WHITE + Style.BRIGHT,
    }

    def __init__(self, verbose: bool = False, use_colors: bool = True):
        super().__init__('%(levelname)s %(name)s: %(message)s' if verbose else '%(message)s')
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        color = self.LEVEL_COLORS.get(record.levelno)
        # Plain INFO stays uncolored so CLI output reads normally
        if not self.use_colors or not color or record.levelno == logging.INFO:
            return text
        return f"{color}{text}{Style.RESET_ALL}"


def parse_size(size_str: str) -> int:
    """
    Parse a human size like "10MB" or "512 KB" into bytes

    Raises:
        ValueError: If the string is not a size
    """
    match = re.fullmatch(r'(\d+(?:\.\d+)?)\s*([KMG]?B)', size_str.strip().upper())
    if not match:
        raise ValueError(f"Invalid size format: {size_str}")
    return int(float(match.group(1)) * SIZE_UNITS[match.group(2)])


def _quiet(names: Iterable[str]) -> None:
    for name in names:
        library_logger = logging.getLogger(name)
        library_logger.setLevel(logging.CRITICAL)
        library_logger.propagate = False


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    console_output: bool = True,
    colored_output: bool = True,
    max_size: str = "10MB",
    backup_count: int = 3,
    verbose: bool = False
) -> None:
    """
    Replace the root handlers with a console handler and an optional log file

    Args:
        level: Minimum level written to the log file
        log_file: Log file path, None for console only
        console_output: Attach the console handler
        colored_output: Color console warnings and errors
        max_size: Log file size before rotation, e.g. "10MB"
        backup_count: Rotated files kept
        verbose: Show every record on the console, with logger names
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    if console_output:
        console = logging.StreamHandler(sys.stderr)
        console.setLevel(logging.DEBUG if verbose else logging.INFO)
        console.addFilter(ConsoleMessageFilter(verbose))
        console.setFormatter(ConsoleFormatter(verbose, colored_output))
        root.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            path, maxBytes=parse_size(max_size), backupCount=backup_count, encoding='utf-8'
        )
        file_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, FILE_DATE_FORMAT))
        root.addHandler(file_handler)

    _quiet(QUIET_LOGGERS)
    logging.getLogger(__name__).debug(f"Logging ready (level={level}, file={log_file or 'none'}, verbose={verbose})")


def resolve_log_path(file_setting: str) -> Optional[Path]:
    """Absolute log file path, relative names live in the config directory"""
    if not file_setting:
        return None
    path = Path(file_setting).expanduser()
    return path if path.is_absolute() else get_settings().get_config_directory() / path


def configure_from_settings(verbose: bool = False) -> None:
    """Configure logging from the logging section of the settings"""
    config = get_settings().logging
    log_path = resolve_log_path(config.file)
    setup_logging(
        level=config.level,
        log_file=str(log_path) if log_path else None,
        console_output=config.console_output,
        colored_output=config.colored_output,
        max_size=config.max_size,
        backup_count=config.backup_count,
        verbose=verbose
    )


def get_current_log_file() -> Optional[Path]:
    """Path of the active log file, None when logging to the console only"""
    for handler in logging.getLogger().handlers:
        if isinstance(handler, logging.handlers.RotatingFileHandler):
            return Path(handler.baseFilename)
    return None


def get_logger(name: str) -> logging.Logger:
    """
    Get logger instance for a module

    The returned logger also has console_info(), console_warning() and
    console_error() for messages meant for the person at the terminal.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)
    if not hasattr(logger, 'console_info'):
        logger.console_info = lambda message: logger.info(message, extra={'console_output': True})
        logger.console_warning = logger.warning
        logger.console_error = logger.error
    return logger


class OperationLogger:
    """Start, progress and outcome records for one search or lyrics lookup"""

    def __init__(self, logger: logging.Logger, operation_name: str):
        self.logger = logger
        self.operation_name = operation_name
        self.started_at: Optional[float] = None

    @property
    def elapsed(self) -> float:
        return time.perf_counter() - self.started_at if self.started_at is not None else 0.0

    def start(self, message: Optional[str] = None) -> None:
        self.started_at = time.perf_counter()
        self.logger.info(message or f"Started {self.operation_name}")

    def progress(self, message: str) -> None:
        self.logger.debug(f"{self.operation_name}: {message}")

    def warning(self, message: str) -> None:
        self.logger.warning(f"{self.operation_name}: {message}")

    def complete(self, message: Optional[str] = None) -> None:
        details = f" - {message}" if message else ""
        self.logger.info(f"Finished {self.operation_name} in {self.elapsed:.2f}s{details}")

    def error(self, message: str, exception: Optional[Exception] = None) -> None:
        self.logger.error(f"Failed {self.operation_name}: {message}", exc_info=exception)


def create_operation_logger(name: str, operation: str) -> OperationLogger:
    """Create an OperationLogger on the module logger for name"""
    return OperationLogger(get_logger(name), operation)


def log_performance(func):
    """Decorator logging the duration of each call at debug level"""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        started = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            get_logger(func.__module__).debug(f"{func.__qualname__} took {time.perf_counter() - started:.3f}s")

    return wrapper
