"""
Logging configuration for the hotel booking API.
Console logging with either a plain text or a JSON formatter.
"""
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from infrastructure.config import settings


class BookingJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that stamps every record with level, logger and environment"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]):
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.now(timezone.utc).isoformat()
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['environment'] = settings.ENVIRONMENT

        # Booking context passed through `extra=`
        for key in ('booking_id', 'user_id', 'stage'):
            if hasattr(record, key):
                log_record[key] = str(getattr(record, key))


LOGGING_CONFIG: Dict[str, Any] = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'standard': {
            'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
        },
        'json': {
            '()': BookingJsonFormatter,
            'format': '%(timestamp)s %(level)s %(logger)s %(message)s'
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': settings.LOG_FORMAT,
        },
    },
    'loggers': {
        '': {
            'handlers': ['console'],
            'level': 'DEBUG' if settings.DEBUG else settings.LOG_LEVEL,
        },
        'uvicorn.access': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
        'passlib': {
            'level': 'ERROR',
        },
    },
}


def setup_logging() -> None:
    """Apply the logging configuration"""
    logging.config.dictConfig(LOGGING_CONFIG)
    logging.getLogger(__name__).debug("Logging configured with %s format", settings.LOG_FORMAT)
