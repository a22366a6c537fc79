import logging
import sys
from datetime import datetime
from typing import Optional

import structlog

from config import AppConfig, config

# Flag to ensure configuration happens only once
_is_configured = False

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"


def _timestamped_log_file(app_config: AppConfig) -> Optional[logging.Handler]:
    """Creates a file handler writing to a per-run file next to the configured log path."""
    log_path = app_config.logging.log_file_path
    if not log_path:
        return None

    log_path.parent.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    run_file = log_path.parent / f"{log_path.stem}_{timestamp}{log_path.suffix}"
    return logging.FileHandler(run_file, encoding="utf-8")


def setup_logging(app_config: Optional[AppConfig] = None) -> None:
    """
    Set up logging for the application using structlog on top of stdlib logging.

    Idempotent: only the first call configures handlers. Every run gets its own
    timestamped log file so that batches can be compared afterwards.
    """
    global _is_configured
    if _is_configured:
        return

    app_config = app_config or config
    log_level = app_config.logging.log_level.upper()
    numeric_level = getattr(logging, log_level, logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = []

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    handlers.append(stream_handler)

    file_handler = _timestamped_log_file(app_config)
    if file_handler is not None:
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    # force=True drops handlers installed by libraries or pytest
    logging.basicConfig(level=numeric_level, handlers=handlers, force=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso", utc=False, key="timestamp"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.render_to_log_kwargs,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _is_configured = True


def get_structured_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger with the given name.

    Example:
        >>> logger = get_structured_logger(__name__)
        >>> logger.info("record_submitted", record_index=3, record_name="Flour")
    """
    return structlog.get_logger(name)


def bind_context(logger: structlog.stdlib.BoundLogger, **context) -> structlog.stdlib.BoundLogger:
    """
    Bind context data to a logger for all subsequent log entries.

    Example:
        >>> record_logger = bind_context(logger, record_index=3, record_name="Flour")
        >>> record_logger.warning("field_failed", field="order_unit")
    """
    return logger.bind(**context)
