import logging
import logging.handlers
import traceback
from datetime import datetime
from pathlib import Path

from inventory_planning.config import config

class Logger:
    """Logging manager for the Inventory Planning System."""

    _instance = None
    _loggers = {}

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super(Logger, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize the logger if not already initialized."""
        if self._initialized:
            return

        self._log_config = config.log_config
        self._log_dir = Path(self._log_config['directory'])

        # Application logger
        self._app_logger = self.get_logger('app')

        self._initialized = True

    def _level(self):
        level_name = str(self._log_config['level']).upper()
        return getattr(logging, level_name, logging.INFO)

    def get_logger(self, name):
        """Get a logger with the specified name.

        Args:
            name: Name of the logger

        Returns:
            Configured logger instance
        """
        if name in self._loggers:
            return self._loggers[name]

        logger = logging.getLogger(name)
        logger.setLevel(self._level())

        # Remove existing handlers to prevent duplicates
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)

        formatter = logging.Formatter(self._log_config['format'])

        if self._log_config['file_output']:
            self._log_dir.mkdir(parents=True, exist_ok=True)
            log_file = self._log_dir / f"{name.split('.')[-1]}.log"
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=self._log_config['max_size_mb'] * 1024 * 1024,
                backupCount=self._log_config['backup_count'],
                encoding='utf-8'
            )
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        if self._log_config['console_output']:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

        # Prevent propagation to root logger to avoid duplicates
        logger.propagate = False

        self._loggers[name] = logger
        return logger

    def log_exception(self, logger_name, exception, message=None):
        """Log an exception with stack trace.

        Args:
            logger_name: Logger name
            exception: Exception object
            message: Optional message to include
        """
        logger = self.get_logger(logger_name)

        if message:
            logger.error(f"{message}: {str(exception)}")
        else:
            logger.error(str(exception))

        logger.error(traceback.format_exc())

    @property
    def app_logger(self):
        """Get the application logger."""
        return self._app_logger

    def run_start_log(self, run_name, additional_info=None):
        """Log the start of a planning run.

        Args:
            run_name: Name of the run (e.g. 'production_plan')
            additional_info: Optional parameters of the run

        Returns:
            Dictionary with run logging information
        """
        run_logger = self.get_logger('runs')
        start_time = datetime.now()

        log_info = {
            'run_name': run_name,
            'start_time': start_time,
            'additional_info': additional_info
        }

        run_logger.info(f"Starting run: {run_name}")
        if additional_info:
            run_logger.info(f"Run parameters: {additional_info}")

        return log_info

    def run_end_log(self, log_info, success=True, result_info=None):
        """Log the end of a planning run.

        Args:
            log_info: Dictionary returned by ``run_start_log``
            success: Whether the run succeeded
            result_info: Optional result information
        """
        run_logger = self.get_logger('runs')
        end_time = datetime.now()

        run_name = log_info.get('run_name', 'Unknown')
        start_time = log_info.get('start_time', end_time)
        duration = end_time - start_time

        if success:
            run_logger.info(f"Completed run: {run_name}")
        else:
            run_logger.error(f"Failed run: {run_name}")

        run_logger.info(f"Run duration: {duration}")

        if result_info:
            run_logger.info(f"Run results: {result_info}")

# Global logger instance
logger = Logger()

def get_logger(name):
    """Get a logger with the specified name."""
    return logger.get_logger(name)

def log_exception(logger_name, exception, message=None):
    """Log an exception with stack trace."""
    logger.log_exception(logger_name, exception, message)
