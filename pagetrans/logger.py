import logging
from pathlib import Path

LOG_DIR = Path(__file__).parent.parent / "logs"
LOG_FILE = LOG_DIR / "app.log"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DISABLED_LEVEL = logging.CRITICAL + 1

# Cache for log mode to avoid repeated config reads
_log_mode_cache = None

# Names of loggers configured by get_logger
_managed_loggers = set()


def _get_log_mode():
    """Get log mode from configuration."""
    global _log_mode_cache
    if _log_mode_cache is not None:
        return _log_mode_cache

    try:
        from pagetrans.config import load_config
        log_mode = load_config().get('log_mode', 'info')
        _log_mode_cache = log_mode
        return log_mode
    except Exception:
        # If config loading fails, default to 'off'
        return 'off'


def _level_for_mode(log_mode: str) -> int:
    if log_mode == 'debug':
        return logging.DEBUG
    if log_mode == 'off':
        return DISABLED_LEVEL
    return logging.INFO


def _make_file_handler(log_format: logging.Formatter) -> logging.FileHandler:
    LOG_DIR.mkdir(exist_ok=True)
    f_handler = logging.FileHandler(LOG_FILE, encoding='utf-8')
    f_handler.setLevel(logging.DEBUG)
    f_handler.setFormatter(log_format)
    return f_handler


def _apply_mode(logger: logging.Logger, log_mode: str):
    """Set levels and add or drop handlers so the logger matches log_mode."""
    level = _level_for_mode(log_mode)
    log_format = logging.Formatter(LOG_FORMAT)
    logger.setLevel(level)

    has_file_handler = any(isinstance(h, logging.FileHandler) for h in logger.handlers)
    has_console_handler = any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        for h in logger.handlers
    )

    if log_mode == 'off':
        for handler in [h for h in logger.handlers if isinstance(h, logging.FileHandler)]:
            handler.close()
            logger.removeHandler(handler)
    else:
        if not has_file_handler:
            logger.addHandler(_make_file_handler(log_format))
        if not has_console_handler:
            c_handler = logging.StreamHandler()
            c_handler.setFormatter(log_format)
            logger.addHandler(c_handler)

    for handler in logger.handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
            handler.setLevel(level)


def _clear_log_mode_cache():
    """Clear the log mode cache and update all existing loggers (call this when config is updated)."""
    global _log_mode_cache
    _log_mode_cache = None

    log_mode = _get_log_mode()

    for logger_name in sorted(_managed_loggers):
        _apply_mode(logging.getLogger(logger_name), log_mode)


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    _apply_mode(logger, _get_log_mode())
    _managed_loggers.add(name)
    return logger
