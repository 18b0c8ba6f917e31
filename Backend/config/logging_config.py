import logging
import logging.config
from pathlib import Path
from typing import Optional

def setup_logging(log_level: str = "INFO", log_file: Optional[str] = "logs/analyzer.log"):
    """Setup logging configuration

    With no log_file only the console handler is installed.
    """
    log_level = log_level.upper()

    handlers = {
        'console': {
            'class': 'logging.StreamHandler',
            'level': log_level,
            'formatter': 'standard',
            'stream': 'ext://sys.stdout'
        }
    }

    if log_file:
        # Ensure the log file and its directory exist
        log_file_path = Path(log_file)
        log_file_path.parent.mkdir(parents=True, exist_ok=True)
        log_file_path.touch(exist_ok=True)

        handlers['file'] = {
            'class': 'logging.handlers.RotatingFileHandler',
            'level': 'DEBUG',
            'formatter': 'detailed',
            'filename': str(log_file_path),
            'maxBytes': 10485760,  # 10MB
            'backupCount': 5,
            'encoding': 'utf8'
        }
        handlers['error_file'] = {
            'class': 'logging.handlers.RotatingFileHandler',
            'level': 'ERROR',
            'formatter': 'detailed',
            'filename': str(log_file_path.with_name('errors.log')),
            'maxBytes': 10485760,  # 10MB
            'backupCount': 5,
            'encoding': 'utf8'
        }

    handler_names = list(handlers)

    LOGGING_CONFIG = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
            },
            'detailed': {
                'format': '%(asctime)s [%(levelname)s] %(name)s [%(filename)s:%(lineno)d]: %(message)s'
            }
        },
        'handlers': handlers,
        'loggers': {
            '': {  # Root logger
                'level': log_level,
                'handlers': handler_names,
                'propagate': False
            },
            'aio_pika': {
                'level': 'WARNING',
                'handlers': handler_names,
                'propagate': False
            },
            'aiormq': {
                'level': 'WARNING',
                'handlers': handler_names,
                'propagate': False
            },
            'neo4j': {
                'level': 'WARNING',
                'handlers': handler_names,
                'propagate': False
            },
            'uvicorn': {
                'level': 'INFO',
                'handlers': handler_names,
                'propagate': False
            }
        }
    }

    # Clear any existing handlers to avoid conflicts
    logging.getLogger().handlers.clear()

    logging.config.dictConfig(LOGGING_CONFIG)

    logger = logging.getLogger(__name__)
    logger.info("Logging configuration initialized")

    return logging.getLogger()
