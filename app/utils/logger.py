# app/utils/logger.py
"""
Centralised logging configuration for the entire application.

Handlers on the root logger:
  console          — everything at LOG_LEVEL
  logs/fleet.log   — everything at LOG_LEVEL, rotating
  logs/trips.log   — audit trail of trip and fleet changes (booking + vehicle services)
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from app.config import settings

LOG_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "logs")
AUDIT_LOGGERS = ("app.services.booking_service", "app.services.vehicle_service")
QUIET_LOGGERS = ("google.auth", "google.cloud", "urllib3", "multipart")

_configured = False


class _AuditFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.name in AUDIT_LOGGERS


def _rotating(path: str, level: str, fmt: logging.Formatter) -> RotatingFileHandler:
    # 10 × 5MB per file
    handler = RotatingFileHandler(path, maxBytes=5 * 1024 * 1024, backupCount=10, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(fmt)
    return handler


def configure_logging(level: str = None, log_dir: str = None):
    """Install handlers once. Later calls are no-ops."""
    global _configured
    if _configured:
        return
    _configured = True

    level = (level or settings.LOG_LEVEL).upper()
    log_dir = log_dir or LOG_DIR
    os.makedirs(log_dir, exist_ok=True)

    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(fmt)

    audit = _rotating(os.path.join(log_dir, "trips.log"), "INFO", fmt)
    audit.addFilter(_AuditFilter())

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(console)
    root.addHandler(_rotating(os.path.join(log_dir, "fleet.log"), level, fmt))
    root.addHandler(audit)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a named logger. Call this at the top of every module."""
    configure_logging()
    return logging.getLogger(name)
