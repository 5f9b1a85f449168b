"""Run logging: colored console output mirrored into a per-run log file."""

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import colorlog

LOGGER_NAME = 'youtrack_kb_exporter'

# Extra levels next to the standard ones; names are at most 7 chars so the
# file format's padded level column stays aligned.
DETAIL = 15
SUCCESS = 25
HEADER = 26

logging.addLevelName(DETAIL, 'DETAIL')
logging.addLevelName(SUCCESS, 'SUCCESS')
logging.addLevelName(HEADER, 'HEADER')

CONSOLE_FORMAT = '%(log_color)s%(message)s'
FILE_FORMAT = '[%(asctime)s] [%(levelname)-7s] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

LOG_COLORS = {
    'DEBUG': 'cyan',
    'DETAIL': 'white',
    'INFO': 'bold_white',
    'SUCCESS': 'green',
    'HEADER': 'cyan',
    'WARNING': 'yellow',
    'ERROR': 'red',
    'CRITICAL': 'red,bg_white',
}

_LEVELS = {
    'DEBUG': logging.DEBUG,
    'DETAIL': DETAIL,
    'INFO': logging.INFO,
    'SUCCESS': SUCCESS,
    'HEADER': HEADER,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL,
}


class _SkipEmptyMessages(logging.Filter):
    """Keep blank spacer lines on the console only."""

    def filter(self, record: logging.LogRecord) -> bool:
        return bool(str(record.getMessage()).strip())


def resolve_level(verbosity: int = 0, level: Optional[str] = None) -> int:
    """
    Map a level name or a -v count to a numeric log level.

    Args:
        verbosity: Verbosity level (0=DETAIL, 1+=DEBUG)
        level: Optional explicit level name; takes precedence over verbosity

    Returns:
        Numeric log level
    """
    if level:
        level_upper = level.upper()
        if level_upper not in _LEVELS:
            raise ValueError(
                f"Invalid log level '{level}'. Must be one of: {sorted(_LEVELS)}"
            )
        return _LEVELS[level_upper]
    return logging.DEBUG if verbosity >= 1 else DETAIL


def _write_log_header(log_path: Path) -> None:
    separator = "=" * 80
    started = datetime.now().strftime(DATE_FORMAT)
    with open(log_path, 'w', encoding='utf-8') as f:
        f.write(f"{separator}\n")
        f.write("  YouTrack Knowledge Base Download Log\n")
        f.write(f"  Started: {started}\n")
        f.write(f"{separator}\n\n")


def setup_logging(
    output_dir: Optional[Union[str, Path]] = None,
    verbosity: int = 0,
    level: Optional[str] = None
) -> Tuple[logging.Logger, Optional[Path]]:
    """
    Set up the run logger with a colored console handler and a run log file.

    Args:
        output_dir: Directory receiving ``download_<timestamp>.log``; console only if None
        verbosity: Verbosity level (0=DETAIL, 1+=DEBUG)
        level: Optional explicit log level string

    Returns:
        Tuple of (configured logger, log file path or None)
    """
    log_level = resolve_level(verbosity, level)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)
    logger.propagate = False

    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(colorlog.ColoredFormatter(
        fmt=CONSOLE_FORMAT,
        log_colors=LOG_COLORS
    ))
    logger.addHandler(console_handler)

    log_path = None
    if output_dir is not None:
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime('%Y-%m-%d_%H-%M-%S')
        log_path = output_dir / f"download_{timestamp}.log"
        _write_log_header(log_path)

        file_handler = logging.FileHandler(log_path, mode='a', encoding='utf-8')
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=DATE_FORMAT))
        file_handler.addFilter(_SkipEmptyMessages())
        logger.addHandler(file_handler)

        logger.log(SUCCESS, f"Log file initialized: {log_path}")

    return logger, log_path


def shutdown_logging(logger: Optional[logging.Logger] = None) -> None:
    """Flush and detach all handlers of the run logger."""
    logger = logger or logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.flush()
        handler.close()
        logger.removeHandler(handler)


class ProgressTracker:
    """Counts finished units (projects) and logs how many completed, and how fast, on exit."""

    def __init__(self, total_items: int, item_type: str = "items", logger: Optional[logging.Logger] = None):
        self.total = total_items
        self.item_type = item_type
        self.done = 0
        self.failed = 0
        self.logger = logger or logging.getLogger(LOGGER_NAME)
        self._started: Optional[float] = None

    def __enter__(self) -> 'ProgressTracker':
        self._started = time.monotonic()
        self.logger.debug(f"Exporting {self.total} {self.item_type}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        # An exception in flight is reported by the caller, not here.
        if exc_type is not None or self._started is None:
            return
        level = logging.WARNING if self.failed else DETAIL
        self.logger.log(
            level,
            f"Finished {self.done}/{self.total} {self.item_type} "
            f"({self.failed} failed) in {format_duration(self.elapsed)}"
        )

    @property
    def elapsed(self) -> float:
        return 0.0 if self._started is None else time.monotonic() - self._started

    def increment(self, success: bool = True) -> None:
        """Record one finished unit."""
        self.done += 1
        if not success:
            self.failed += 1


def format_duration(seconds: float) -> str:
    """``12.3s``, ``4m 5s`` or ``1h 2m 3s``."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    whole = int(seconds)
    hours, rest = divmod(whole, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    return f"{minutes}m {secs}s"


def log_section(title: str, logger: Optional[logging.Logger] = None, level: int = HEADER) -> None:
    """
    Log a decorative section header.

    Args:
        title: Section title to display
        logger: Logger instance
        level: Level used for the banner lines
    """
    logger = logger or logging.getLogger(LOGGER_NAME)

    separator = "=" * 40
    logger.log(level, separator)
    logger.log(level, title)
    logger.log(level, separator)


def log_config(config: Dict[str, Any], logger: Optional[logging.Logger] = None) -> None:
    """
    Log sanitized configuration. The token is never written out.

    Args:
        config: Configuration dictionary to log
        logger: Logger instance
    """
    logger = logger or logging.getLogger(LOGGER_NAME)
    sanitized = _sanitize_config(config)

    youtrack = sanitized.get('youtrack', {})
    export_settings = sanitized.get('export', {})
    base_url = youtrack.get('base_url', 'Not Set')

    logger.info("Configuration:")
    logger.log(DETAIL, f"  Base URL: {base_url}")
    logger.log(DETAIL, f"  API URL: {base_url}/api")
    logger.log(DETAIL, f"  Output path: {export_settings.get('output_directory', 'Not Set')}")
    logger.log(DETAIL, f"  Token: {youtrack.get('token', 'Not Set')}")
    logger.debug(f"  Page size: {export_settings.get('page_size', 100)}")
    logger.debug(f"  Max depth: {export_settings.get('max_depth', 50)}")
    logger.debug(f"  Download attachments: {export_settings.get('download_attachments', True)}")


_SENSITIVE_KEYS = ('token', 'password', 'secret', 'api_key', 'auth_header')
REDACTED = "***REDACTED***"


def _sanitize_config(config: Any) -> Any:
    """Copy of ``config`` with credential-like string values replaced by a marker."""
    if isinstance(config, dict):
        return {
            key: REDACTED if isinstance(value, str) and any(s in str(key).lower() for s in _SENSITIVE_KEYS)
            else _sanitize_config(value)
            for key, value in config.items()
        }
    if isinstance(config, list):
        return [_sanitize_config(item) for item in config]
    return config


__all__ = [
    'LOGGER_NAME',
    'DETAIL',
    'SUCCESS',
    'HEADER',
    'setup_logging',
    'shutdown_logging',
    'resolve_level',
    'ProgressTracker',
    'log_section',
    'log_config',
    'format_duration'
]
