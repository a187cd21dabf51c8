import logging
import logging.config
import os
from datetime import datetime
from salestrack.core.config import settings

def setup_logging():
    """Setup application logging configuration"""

    log_dir = settings.LOG_DIR
    for sub_dir in ("app", "access", "error", "celery"):
        os.makedirs(os.path.join(log_dir, sub_dir), exist_ok=True)

    # Get current date for log file naming
    current_date = datetime.now().strftime("%Y-%m-%d")

    def _file_handler(sub_dir: str, level: str, formatter: str) -> dict:
        return {
            "class": "logging.handlers.RotatingFileHandler",
            "level": level,
            "formatter": formatter,
            "filename": os.path.join(log_dir, sub_dir, f"{sub_dir}-{current_date}.log"),
            "maxBytes": 10485760,  # 10MB
            "backupCount": 10,
        }

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(module)s - %(funcName)s:%(lineno)d - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "access": {
                "format": "%(asctime)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": settings.LOG_LEVEL,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
            "app_file": _file_handler("app", settings.LOG_LEVEL, "detailed"),
            "error_file": _file_handler("error", "ERROR", "detailed"),
            "access_file": _file_handler("access", "INFO", "access"),
            "celery_file": _file_handler("celery", "INFO", "detailed"),
        },
        "loggers": {
            "": {  # Root logger
                "level": settings.LOG_LEVEL,
                "handlers": ["console", "app_file", "error_file"],
                "propagate": False,
            },
            "celery": {
                "level": "INFO",
                "handlers": ["celery_file", "console"],
                "propagate": False,
            },
            "access": {
                "level": "INFO",
                "handlers": ["access_file"],
                "propagate": False,
            },
            "uvicorn.access": {
                "level": "INFO",
                "handlers": ["access_file"],
                "propagate": False,
            },
            "sqlalchemy.engine": {
                "level": "WARNING",  # Reduce DB query noise
                "handlers": ["app_file"],
                "propagate": False,
            },
        },
    }

    logging.config.dictConfig(logging_config)

    logger = logging.getLogger(__name__)
    logger.info("SalesTrack - Logging configured")
    logger.info(f"Log level: {settings.LOG_LEVEL}")
    logger.info(f"Logs directory: {log_dir}/")
