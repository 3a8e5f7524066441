"""
Logging configuration for the bomfold command line tool.
Library modules only create module loggers; this is the one place handlers are installed.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# LogRecord attributes that are not user-supplied extras
_RESERVED_ATTRS = set(vars(logging.LogRecord('', 0, '', 0, '', (), None))) | {'message', 'asctime'}


class StructuredFormatter(logging.Formatter):
    """Formatter that emits one JSON object per record, including any extra fields."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


def setup_logging(
    level: str = 'WARNING',
    log_file: Optional[str] = None,
    max_file_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    structured: bool = False,
    stream=None
) -> None:
    """
    Configure the root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to a rotating log file (optional)
        max_file_size: Maximum size of log file before rotation
        backup_count: Number of backup files to keep
        structured: Emit JSON lines instead of text
        stream: Console stream (default: stderr, keeping stdout for the rendered tree)
    """
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    logger.handlers.clear()

    formatter = StructuredFormatter() if structured else logging.Formatter(TEXT_FORMAT)

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # openpyxl and chardet are chatty at DEBUG
    logging.getLogger('openpyxl').setLevel(logging.WARNING)
    logging.getLogger('chardet').setLevel(logging.WARNING)

    logger.debug(f"Logging configured: level={level}, file={log_file}, structured={structured}")
