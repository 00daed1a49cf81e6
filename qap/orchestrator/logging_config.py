"""
QAP Structured Logging Configuration
====================================

Configures logging with support for:
- JSON structured output (for production / log aggregation)
- Human-readable output with the QAP context appended (for development)
- File rotation

Workflow modules attach context through `extra=`:

    logger.info("Record handed off", extra={"qap_id": record.id, "status": "draft"})

Usage:
    from qap.orchestrator.logging_config import setup_logging

    setup_logging(json_output=True, log_file="logs/qap.log")
"""

import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from typing import Dict, Optional

# LogRecord attributes copied into output when passed via `extra=`
EXTRA_FIELDS = ("qap_id", "sno", "stage", "actor", "status")

TEXT_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)-30s | %(message)s"


def record_context(record: logging.LogRecord) -> Dict[str, object]:
    """QAP context fields set on a log record, in EXTRA_FIELDS order."""
    context = {}
    for key in EXTRA_FIELDS:
        val = getattr(record, key, None)
        if val is not None:
            context[key] = val
    return context


class JSONFormatter(logging.Formatter):
    """
    Formats log records as JSON lines.

    Output format:
        {"ts": "2026-...", "level": "INFO", "logger": "qap.lifecycle", "msg": "...", "qap_id": ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        log_entry.update(record_context(record))
        return json.dumps(log_entry, default=str)


class ContextFormatter(logging.Formatter):
    """Text formatter that appends QAP context as `[qap_id=... stage=...]`."""

    def __init__(self):
        super().__init__(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = record_context(record)
        if not context:
            return line
        pairs = " ".join(f"{key}={val}" for key, val in context.items())
        head, sep, tail = line.partition("\n")
        return f"{head} [{pairs}]{sep}{tail}"


def setup_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 5,
):
    """
    Configure application logging.

    Console output goes to stderr: `qap catalog --json` and `qap build`
    print records on stdout, which must stay parseable.

    Args:
        level: Root log level (DEBUG, INFO, WARNING, ERROR)
        json_output: Use JSON structured format
        log_file: Optional file path for log output (with rotation)
        max_bytes: Max file size before rotation
        backup_count: Number of rotated files to keep
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    root.handlers.clear()

    formatter = JSONFormatter() if json_output else ContextFormatter()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    root.info(
        "Logging configured: level=%s json=%s file=%s",
        level, json_output, log_file or "none",
    )
