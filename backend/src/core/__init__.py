"""
Core package for the Touchline match recorder.
Contains exceptions, utilities, and common functionality.
"""

from .exceptions import *
from .error_handler import ErrorHandler, error_handler, safe_execute
from .utils import *

__all__ = [
    # Base exceptions
    "TouchlineException",
    "ErrorContext",
    "ValidationError",
    "ConfigurationError",

    # Domain exceptions
    "DomainException",
    "SubstitutionCapacityError",
    "MatchStateError",
    "MatchNotFoundError",
    "PlayerNotFoundError",

    # Storage exceptions
    "StorageException",
    "StorageConnectionError",
    "StorageSerializationError",

    # Error handler
    "ErrorHandler",
    "error_handler",
    "safe_execute",

    # Utilities
    "LoggerFactory",
    "IdentifierFactory",
    "StorageKeyBuilder",
    "DataValidator",
]
