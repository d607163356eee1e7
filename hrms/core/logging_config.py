import logging
import logging.config
import os
from datetime import datetime
from hrms.core.config import settings

# Log streams written under LOG_DIR, one sub-directory each
LOG_STREAMS = ("app", "error", "access", "audit")

def _rotating_handler(log_dir: str, stream: str, level: str, formatter: str, stamp: str) -> dict:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": level,
        "formatter": formatter,
        "filename": os.path.join(log_dir, stream, f"{stream}-{stamp}.log"),
        "maxBytes": settings.LOG_MAX_BYTES,
        "backupCount": settings.LOG_BACKUP_COUNT,
        "encoding": "utf-8",
    }

def build_logging_config(log_dir: str, level: str) -> dict:
    """dictConfig for console output plus the rotating app/error/access/audit files"""
    stamp = datetime.now().strftime("%Y-%m-%d")

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "default",
            "stream": "ext://sys.stdout",
        },
        "app_file": _rotating_handler(log_dir, "app", level, "detailed", stamp),
        "error_file": _rotating_handler(log_dir, "error", "ERROR", "detailed", stamp),
        "access_file": _rotating_handler(log_dir, "access", "INFO", "plain", stamp),
        "audit_file": _rotating_handler(log_dir, "audit", "INFO", "plain", stamp),
    }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "format": "%(asctime)s | %(levelname)-7s | %(name)s:%(funcName)s:%(lineno)d | %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "plain": {
                "format": "%(asctime)s | %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": handlers,
        "loggers": {
            "": {
                "level": level,
                "handlers": ["console", "app_file", "error_file"],
            },
            # log_user_action
            "hrms.audit": {
                "level": "INFO",
                "handlers": ["audit_file", "console"],
                "propagate": False,
            },
            # LoggingMiddleware and uvicorn request lines
            "access": {"level": "INFO", "handlers": ["access_file"], "propagate": False},
            "uvicorn.access": {"level": "INFO", "handlers": ["access_file"], "propagate": False},
            "sqlalchemy.engine": {"level": "WARNING", "handlers": ["app_file"], "propagate": False},
        },
    }

def setup_logging():
    """Configure logging for the API process and the seed script"""
    log_dir = settings.LOG_DIR
    for stream in LOG_STREAMS:
        os.makedirs(os.path.join(log_dir, stream), exist_ok=True)

    logging.config.dictConfig(build_logging_config(log_dir, settings.LOG_LEVEL.upper()))

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured: level {settings.LOG_LEVEL}, directory {log_dir}")
