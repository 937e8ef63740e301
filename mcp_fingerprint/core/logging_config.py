import logging
import sys
from typing import Any, Dict, Optional

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

PACKAGE_LOGGERS = [
    'mcp_fingerprint',
    'mcp_fingerprint.core',
    'mcp_fingerprint.error_handling',
]


def setup_logging(level: str = 'INFO', stream=None) -> None:
    """
    Configure logging for the comparator.

    Logs always go to stderr (or ``stream``) so that stdout only carries the
    comparison report.

    Args:
        level: Logging level (default: 'INFO')
        stream: Optional stream for the handler, defaults to sys.stderr
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.setLevel(level.upper())

    formatter = logging.Formatter(DEFAULT_FORMAT)
    stderr_handler = logging.StreamHandler(stream or sys.stderr)
    stderr_handler.setFormatter(formatter)
    root_logger.addHandler(stderr_handler)

    for logger_name in PACKAGE_LOGGERS:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level.upper())
        # Ensure the logger uses the root logger's handlers
        logger.propagate = True
        logger.handlers = []

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(f"Logging configured with level {level.upper()}")


def setup_logging_from_config(logging_config: Dict[str, Any], default_level: Optional[str] = None) -> None:
    """
    Set up logging from a logging config dictionary (as in the YAML config).
    Supports multiple handlers (StreamHandler, FileHandler) and custom formats.
    """
    level = str(logging_config.get('level', default_level or 'INFO')).upper()
    setup_logging(level)

    handler_configs = logging_config.get('handlers')
    if not handler_configs:
        return

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(logging_config.get('format', DEFAULT_FORMAT))
    for handler_cfg in handler_configs:
        if handler_cfg['type'] == 'StreamHandler':
            handler = logging.StreamHandler(sys.stderr)
        elif handler_cfg['type'] == 'FileHandler':
            handler = logging.FileHandler(handler_cfg['filename'])
        else:
            continue
        handler.setLevel(str(handler_cfg.get('level', level)).upper())
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)
