from .config import config
from .logging_setup import logger, get_logger
from .exceptions import (
    PlanningError, ConfigError, DatabaseError, ValidationError,
    CalculationError, PersistenceError, NotFoundError
)

__version__ = '0.1.0'

__all__ = [
    'config',
    'logger',
    'get_logger',
    'PlanningError',
    'ConfigError',
    'DatabaseError',
    'ValidationError',
    'CalculationError',
    'PersistenceError',
    'NotFoundError'
]
